"""Voucher field extraction (core domain).

Every extractor is best-effort and independent: it returns None when nothing
matches and never raises. Only the first match of each pattern is used.
"""

from __future__ import annotations

import re
from typing import Optional

from voucherkeeper.core.lexicon import KNOWN_MERCHANTS
from voucherkeeper.core.models import MANUAL_SENDER, ExtractedData, Message

# Regex scans only look at this many leading characters. Multipart SMS bodies
# are far shorter; the cap keeps pathological input from dominating a call.
MAX_SCAN_CHARS = 4096

URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)

# ASCII keeps IGNORECASE from folding e.g. the Kelvin sign into [A-Z].
LABELED_CODE_PATTERN = re.compile(r"(?:code|קוד)[\s:]*([A-Z0-9]{4,})", re.IGNORECASE | re.ASCII)
# Case-sensitive on purpose: only all-caps/digit runs count as a bare code.
# Still loose, e.g. tracking numbers and order ids match too.
STANDALONE_CODE_PATTERN = re.compile(r"[A-Z0-9]{6,}")

AMOUNT_PATTERN = re.compile(
    r"[0-9]+(?:[.,][0-9]{1,2})?\s*(?:₪|NIS|ILS|\$|USD|EUR|€)",
    re.IGNORECASE,
)


def _scan_window(text: str) -> str:
    return text[:MAX_SCAN_CHARS]


def _search(pattern: re.Pattern[str], text: str) -> Optional[re.Match[str]]:
    """First match inside the scan window, or None.

    A match that runs into the end of a cut window may be a fragment of a
    longer token, so it counts as absent rather than as a shortened value.
    """

    window = _scan_window(text)
    match = pattern.search(window)
    if match is None:
        return None
    if len(text) > len(window) and match.end() == len(window):
        return None
    return match


def extract_url(text: str) -> Optional[str]:
    """Return the first http(s) URL in text."""

    match = _search(URL_PATTERN, text)
    return match.group(0) if match else None


def extract_redeem_code(text: str) -> Optional[str]:
    """Return a labeled code ("code: X", "קוד X"), else a standalone code."""

    labeled = _search(LABELED_CODE_PATTERN, text)
    if labeled:
        return labeled.group(1)

    standalone = _search(STANDALONE_CODE_PATTERN, text)
    return standalone.group(0) if standalone else None


def extract_amount(text: str) -> Optional[str]:
    """Return the first amount with its currency token, exactly as written."""

    match = _search(AMOUNT_PATTERN, text)
    return match.group(0) if match else None


def extract_merchant_name(text: str, sender_name: Optional[str]) -> Optional[str]:
    """Prefer the sender display name, otherwise look for a known merchant."""

    if sender_name:
        return sender_name

    lowered = _scan_window(text).lower()
    for merchant in KNOWN_MERCHANTS:
        if merchant.lower() in lowered:
            return merchant
    return None


def extract_voucher_data(message: Message) -> ExtractedData:
    """Run all extractors over a message body."""

    text = message.body_text
    return ExtractedData(
        raw_message=text,
        merchant_name=extract_merchant_name(text, message.sender_name),
        amount=extract_amount(text),
        voucher_url=extract_url(text),
        redeem_code=extract_redeem_code(text),
    )


def extract_from_text(text: str) -> ExtractedData:
    """Extract fields from pasted text, e.g. for a manually added voucher."""

    return extract_voucher_data(Message(sender_phone=MANUAL_SENDER, body_text=text, timestamp=0))
