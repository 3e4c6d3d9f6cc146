from __future__ import annotations

import pytest

from voucherkeeper.adapters.notification_formatting import (
    APPROVED_TITLE,
    DEFAULT_DISPLAY_NAME,
    PENDING_TITLE,
    display_name,
    format_notification,
)
from voucherkeeper.core.models import VoucherRecord


def _record(**overrides) -> VoucherRecord:
    fields = dict(
        status="approved",
        sender_phone="0542199006",
        raw_message="raw",
        timestamp=1_700_000_000_000,
    )
    fields.update(overrides)
    return VoucherRecord(**fields)


def test_display_name_fallbacks() -> None:
    assert display_name(_record(merchant_name="Cibus", sender_name="Boss")) == "Cibus"
    assert display_name(_record(sender_name="Boss")) == "Boss"
    assert display_name(_record()) == DEFAULT_DISPLAY_NAME


def test_plain_approved_lists_present_fields_only() -> None:
    text = format_notification(_record(merchant_name="Cibus", amount="100 ₪"), approved=True, mode="plain")
    assert f"{APPROVED_TITLE}: Cibus" in text
    assert "Amount: 100 ₪" in text
    assert "Code:" not in text


def test_pending_notification_is_generic() -> None:
    text = format_notification(_record(merchant_name="Cibus", redeem_code="SECRET1"), approved=False, mode="plain")
    assert PENDING_TITLE in text
    assert "SECRET1" not in text


def test_html_escapes_and_links() -> None:
    record = _record(merchant_name="<A&B>", voucher_url="https://pluxee.co.il/v?a=1&b=2")
    text = format_notification(record, approved=True, mode="html")
    assert "&lt;A&amp;B&gt;" in text
    assert '<a href="https://pluxee.co.il/v?a=1&amp;b=2">' in text


def test_markdown_escapes_special_characters() -> None:
    text = format_notification(_record(merchant_name="*Cibus*"), approved=True, mode="markdown")
    assert "\\*Cibus\\*" in text


def test_unknown_mode_raises() -> None:
    with pytest.raises(ValueError):
        format_notification(_record(), approved=True, mode="sms")
