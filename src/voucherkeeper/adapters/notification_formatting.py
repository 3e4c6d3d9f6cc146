"""Shared notification formatting helpers.

Keeping formatting here prevents drift between adapters and keeps messages
consistent regardless of delivery channel.
"""

from __future__ import annotations

from datetime import datetime, timezone
import html

from voucherkeeper.core.models import VoucherRecord

APPROVED_TITLE = "Voucher approved"
PENDING_TITLE = "Voucher pending review"
DEFAULT_DISPLAY_NAME = "New voucher"
PENDING_BODY = "A message that looks like a voucher is waiting for your review."


def display_name(record: VoucherRecord) -> str:
    """Return the name shown for a voucher: merchant, then sender, then a default."""

    return record.merchant_name or record.sender_name or DEFAULT_DISPLAY_NAME


def _timestamp(record: VoucherRecord) -> str:
    received = datetime.fromtimestamp(record.timestamp / 1000, tz=timezone.utc)
    return received.astimezone().strftime("%H:%M:%S %d-%m-%Y")


def _details(record: VoucherRecord) -> list[tuple[str, str]]:
    fields = [
        ("Amount", record.amount),
        ("Code", record.redeem_code),
        ("Link", record.voucher_url),
    ]
    return [(label, value) for label, value in fields if value]


def _format_plain(record: VoucherRecord, approved: bool) -> str:
    if not approved:
        return f"[{_timestamp(record)}] {PENDING_TITLE}\n{PENDING_BODY}"
    lines = [f"[{_timestamp(record)}] {APPROVED_TITLE}: {display_name(record)}"]
    lines.extend(f"{label}: {value}" for label, value in _details(record))
    return "\n".join(lines)


def _format_markdown(record: VoucherRecord, approved: bool) -> str:
    def escape_md(value: str) -> str:
        for ch in r"*[`":
            value = value.replace(ch, f"\\{ch}")
        return value

    divider = "──────────────"
    if not approved:
        return "\n".join([f"[{_timestamp(record)}]", f"**{PENDING_TITLE}**", divider, PENDING_BODY])

    lines = [
        f"[{_timestamp(record)}]",
        f"**{APPROVED_TITLE}:** {escape_md(display_name(record))}",
        divider,
    ]
    lines.extend(f"**{label}:** {escape_md(value)}" for label, value in _details(record))
    return "\n".join(lines)


def _format_html(record: VoucherRecord, approved: bool) -> str:
    timestamp = html.escape(_timestamp(record))
    if not approved:
        return "\n".join([f"[{timestamp}]", f"<b>{PENDING_TITLE}</b>", "──────────────", PENDING_BODY])

    parts = [
        f"[{timestamp}]",
        f"<b>{APPROVED_TITLE}:</b> {html.escape(display_name(record))}",
        "──────────────",
    ]
    for label, value in _details(record):
        safe = html.escape(value)
        if label == "Link":
            parts.append(f"<b>{label}:</b> <a href=\"{safe}\">{safe}</a>")
        else:
            parts.append(f"<b>{label}:</b> {safe}")
    return "\n".join(parts)


def format_notification(record: VoucherRecord, approved: bool, mode: str) -> str:
    """Return the notification formatted for the requested mode."""

    if mode == "plain":
        return _format_plain(record, approved)
    if mode == "markdown":
        return _format_markdown(record, approved)
    if mode == "html":
        return _format_html(record, approved)
    raise ValueError(f"Unsupported notification format: {mode}")
