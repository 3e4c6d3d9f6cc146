from __future__ import annotations

from voucherkeeper.core.lexicon import (
    COUPON_PROMO_TERMS,
    KNOWN_MERCHANTS,
    STRONG_VOUCHER_TERMS,
    TRUSTED_VOUCHER_DOMAINS,
    contains_any_term,
    contains_trusted_domain,
)


def test_contains_any_term_ignores_english_case() -> None:
    assert contains_any_term("Your E-VOUCHER is ready", STRONG_VOUCHER_TERMS)
    assert contains_any_term("FREE SHIPPING this week", COUPON_PROMO_TERMS)


def test_contains_any_term_matches_hebrew_substrings() -> None:
    assert contains_any_term("שלום, קיבלת שובר מתנה", STRONG_VOUCHER_TERMS)
    assert not contains_any_term("שלום, מה שלומך?", STRONG_VOUCHER_TERMS)


def test_contains_any_term_empty_text() -> None:
    assert not contains_any_term("", STRONG_VOUCHER_TERMS)
    assert not contains_any_term("   ", COUPON_PROMO_TERMS)


def test_contains_any_term_is_substring_based() -> None:
    # "sale" inside "wholesale" still counts; matching is not word-bounded.
    assert contains_any_term("wholesale prices", COUPON_PROMO_TERMS)


def test_contains_trusted_domain_builtin_and_case() -> None:
    assert contains_trusted_domain("https://CIBUS.PLUXEE.CO.IL/x1")
    assert not contains_trusted_domain("https://random-unrelated-site.com")


def test_contains_trusted_domain_matches_inside_path_or_query() -> None:
    assert contains_trusted_domain("https://example.com/redirect?to=shufersal.co.il")


def test_contains_trusted_domain_extra_domains() -> None:
    url = "https://mygift.example.com/a/1"
    assert not contains_trusted_domain(url)
    assert contains_trusted_domain(url, ["MyGift.Example.com"])


def test_contains_trusted_domain_ignores_blank_extra_domains() -> None:
    assert not contains_trusted_domain("https://example.com", ["", "  "])


def test_word_banks_are_immutable_and_populated() -> None:
    assert isinstance(STRONG_VOUCHER_TERMS, frozenset)
    assert isinstance(COUPON_PROMO_TERMS, frozenset)
    assert "cibus.pluxee.co.il" in TRUSTED_VOUCHER_DOMAINS
    assert KNOWN_MERCHANTS.index("Cibus") < KNOWN_MERCHANTS.index("Pluxee")
