"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so voucher notifications reach a phone even
when the classifier runs on a server.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request

from voucherkeeper.adapters.notification_formatting import format_notification
from voucherkeeper.core.models import VoucherRecord


class TelegramBotNotifier:
    """Notifier adapter that sends messages via the Telegram Bot API."""

    def __init__(self, bot_token: str, chat_id: str) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id

    def _endpoint(self) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def _post(self, text: str) -> None:
        payload = {
            "chat_id": self._chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        # Blocking HTTP call; the adapter boundary makes it easy to swap for
        # an async client later.
        try:
            with urllib.request.urlopen(request, timeout=10):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bot API error {e.code}: {body}") from e

    async def voucher_approved(self, record: VoucherRecord) -> None:
        """Send the "voucher approved" notification."""

        self._post(format_notification(record, approved=True, mode="html"))

    async def pending_review(self, record: VoucherRecord) -> None:
        """Send the generic "pending review" notification."""

        self._post(format_notification(record, approved=False, mode="html"))
