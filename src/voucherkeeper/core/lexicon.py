"""Word banks and substring predicates (core domain).

The term sets are the tunable parameters of the classifier. They are module
level frozensets so concurrent classifications can share them without any
locking.
"""

from __future__ import annotations

from typing import Iterable

# Phrases that indicate an actual monetary voucher or gift card.
STRONG_VOUCHER_TERMS = frozenset(
    {
        # Hebrew
        "שובר",
        "שובר דיגיטלי",
        "שובר אישי",
        "שובר בסך",
        "תו קנייה",
        "תו קניה",
        "תו מתנה",
        "כרטיס מתנה",
        "גיפט קארד",
        "הטבה",
        "הטבת",
        "הטבתך",
        "קוד מימוש",
        "קוד אישי",
        "קוד נטען",
        "קוד הטבה",
        "קוד לרכישה",
        "קוד למימוש",
        "קוד קופון אישי",
        "ההטבה למימוש",
        "קוד למימוש ההטבה",
        "קוד למימוש השובר",
        "קוד למימוש התו",
        "יתרת השובר",
        "יתרת התו",
        "הוטען לזכותך",
        "קיבלת שובר",
        "קיבלת תו",
        "לצפייה בשובר",
        "לצפיה בשובר",
        "תודה על רכישתך",
        "מימוש ההטבה",
        "אתר ההטבות",
        "ממשק מולטיפאס",
        # English
        "voucher",
        "e-voucher",
        "gift card",
        "giftcard",
        "e-gift",
        "store credit",
        "voucher code",
        "gift card code",
        "redeem your voucher",
        "redeem gift card",
        "redeem code",
        "redeem",
        "benefit code",
        "personal code",
    }
)

# Phrases that indicate marketing or promotional content.
COUPON_PROMO_TERMS = frozenset(
    {
        # Hebrew
        "קופון",
        "קוד קופון",
        "קוד הנחה",
        "מבצע",
        "מבצעים",
        "הנחה",
        "הנחות",
        "ב-50% הנחה",
        "30% הנחה",
        "40% הנחה",
        "1+1",
        "תפריט",
        "משפחתית",
        "מגוונים",
        "מוצר ב-",
        "משלוח",
        "איסוף",
        "מבצע השבוע",
        "הטבה לכולם",
        "פיצה",
        "סלטים",
        "שנייה ב-50",
        "הצעה מיוחדת",
        "סייל",
        "דיל",
        "עד %",
        "% הנחה",
        "משלוח חינם",
        "ללא כפל מבצעים",
        "מינ' הזמנה",
        "להזמנה",
        "בלעדי לחברי VIP",
        "תקף ל-",
        "ימים אחרונים",
        "עד גמר המלאי",
        # English
        "coupon",
        "promo code",
        "promocode",
        "discount",
        "sale",
        "deal",
        "promotion",
        "special deal",
        "% off",
        "limited time",
        "flash sale",
        "menu",
        "order now",
        "buy now",
        "only today",
        "free shipping",
    }
)

# Newsletter phrases that mean marketing even next to voucher words. Only
# consulted when the hard-spam pre-filter is switched on.
HARD_SPAM_INDICATORS = frozenset(
    {
        # Hebrew
        "עד גמר המלאי",
        "בתוקף עד",
        "תקף עד",
        "להצטרפות לערוץ",
        "להסרה שלחו",
        "ללא כפל מבצעים",
        "המוקדם מבניהם",
        "כפוף לתקנון",
        "קופונים משתלמים",
        "ערוץ המבצעים",
        "מגוון קופונים",
        "שוברים שיאים",
        # English
        "while supplies last",
        "limited quantity",
        "terms and conditions apply",
        "unsubscribe",
        "opt out",
    }
)

# Redemption portals. A URL containing any of these is an access point.
TRUSTED_VOUCHER_DOMAINS = frozenset(
    {
        "pluxee.co.il",
        "myconsumers.pluxee.co.il",
        "cibus.pluxee.co.il",
        "edenred.co.il",
        "shufersal.co.il",
        "shufersal.club",
        "ems.to",
        "vp4.me",
        "r.vp4.me",
        "fls.cx",
        "l5k.me",
        "yellow.co.il",
        "yellow.onelink.me",
    }
)

# Merchant names searched in the body when no display name is available.
# Order is the tie-break: the first entry found wins, so more specific
# brands come before the umbrella brands they live under.
KNOWN_MERCHANTS = (
    "סיבוס",
    "Cibus",
    "פלאקסי",
    "Pluxee",
    "שופרסל",
    "Shufersal",
    "מולטיפאס",
    "Multipass",
    "אדנרד",
    "Edenred",
    "תו הזהב",
    "BuyMe",
    "ביימי",
    "Yellow",
    "יילו",
    "נופשונית",
    "Nofshonit",
)


def contains_any_term(text: str, terms: Iterable[str]) -> bool:
    """Return True if any term occurs in text, ignoring case.

    Folding is a plain lower() on both sides. Hebrew has no case, so only the
    English terms are affected.
    """

    lowered = text.lower()
    return any(term.lower() in lowered for term in terms)


def contains_trusted_domain(url: str, extra_domains: Iterable[str] = ()) -> bool:
    """Return True if the URL contains a built-in or extra trusted domain.

    This is a substring check over the whole URL, not a hostname comparison,
    so a domain appearing in the path or query string also counts.
    """

    lowered = url.lower()
    extra = {domain.strip().lower() for domain in extra_domains if domain and domain.strip()}
    return any(domain in lowered for domain in TRUSTED_VOUCHER_DOMAINS | extra)
