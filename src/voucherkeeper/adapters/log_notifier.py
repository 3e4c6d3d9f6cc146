"""Logging notification adapter.

Default notifier when no delivery channel is configured: notifications end up
in the application log.
"""

from __future__ import annotations

import logging

from voucherkeeper.adapters.notification_formatting import format_notification
from voucherkeeper.core.models import VoucherRecord

LOGGER = logging.getLogger(__name__)


class LogNotifier:
    """Notifier adapter that writes plain-text notifications to the log."""

    async def voucher_approved(self, record: VoucherRecord) -> None:
        LOGGER.info("%s", format_notification(record, approved=True, mode="plain"))

    async def pending_review(self, record: VoucherRecord) -> None:
        LOGGER.info("%s", format_notification(record, approved=False, mode="plain"))
