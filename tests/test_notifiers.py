from __future__ import annotations

import asyncio
import io
import json
import logging
import urllib.error
import urllib.request

import pytest

from voucherkeeper.adapters.log_notifier import LogNotifier
from voucherkeeper.adapters.telegram_bot_notifier import TelegramBotNotifier
from voucherkeeper.core.models import VoucherRecord


def _record() -> VoucherRecord:
    return VoucherRecord(
        status="approved",
        sender_phone="0542199006",
        raw_message="קיבלת שובר מתנה! קוד: ABCD1234",
        timestamp=1_700_000_000_000,
        merchant_name="Cibus",
        redeem_code="ABCD1234",
    )


def test_log_notifier_writes_approved_voucher(caplog) -> None:
    caplog.set_level(logging.INFO, logger="voucherkeeper.adapters.log_notifier")
    asyncio.run(LogNotifier().voucher_approved(_record()))
    assert "Voucher approved: Cibus" in caplog.text
    assert "Code: ABCD1234" in caplog.text


def test_log_notifier_pending_hides_voucher_details(caplog) -> None:
    caplog.set_level(logging.INFO, logger="voucherkeeper.adapters.log_notifier")
    asyncio.run(LogNotifier().pending_review(_record()))
    assert "Voucher pending review" in caplog.text
    assert "ABCD1234" not in caplog.text


class _Response:
    def __enter__(self) -> "_Response":
        return self

    def __exit__(self, *exc) -> None:
        return None


def test_bot_notifier_posts_html_message(monkeypatch) -> None:
    sent = []

    def fake_urlopen(request, timeout):
        sent.append(request)
        return _Response()

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    asyncio.run(TelegramBotNotifier(bot_token="123:abc", chat_id="42").voucher_approved(_record()))

    [request] = sent
    assert request.full_url == "https://api.telegram.org/bot123:abc/sendMessage"
    payload = json.loads(request.data.decode("utf-8"))
    assert payload["chat_id"] == "42"
    assert payload["parse_mode"] == "HTML"
    assert "<b>Voucher approved:</b> Cibus" in payload["text"]


def test_bot_notifier_turns_http_error_into_runtime_error(monkeypatch) -> None:
    def fake_urlopen(request, timeout):
        raise urllib.error.HTTPError(
            request.full_url,
            400,
            "Bad Request",
            None,
            io.BytesIO(b'{"ok":false,"description":"chat not found"}'),
        )

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    notifier = TelegramBotNotifier(bot_token="123:abc", chat_id="42")

    with pytest.raises(RuntimeError, match="Bot API error 400: .*chat not found"):
        asyncio.run(notifier.pending_review(_record()))
