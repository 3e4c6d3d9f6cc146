"""Core message processing pipeline.

This module is platform-agnostic. It only relies on ports for storage and
notifications, so the same flow serves the CLI, a webhook or a phone bridge.

The processor enforces a strict order:
1) Resolve whether the sender is approved (phone or saved name)
2) Strict mode short-circuit for unknown senders
3) Classify with the built-in and user-managed trusted domains
4) Persist approved/pending vouchers
5) Notify
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Optional, Tuple, assert_never

from voucherkeeper.core.config import EngineConfig, NotificationConfig
from voucherkeeper.core.decision import classify
from voucherkeeper.core.models import (
    STATUS_APPROVED,
    STATUS_PENDING,
    ApprovedSender,
    Approved,
    Decision,
    Discard,
    Message,
    Pending,
    VoucherRecord,
)
from voucherkeeper.core.phone import are_equal, normalize
from voucherkeeper.core.ports import NotifierPort, StoragePort

LOGGER = logging.getLogger(__name__)


def resolve_sender(message: Message, storage: StoragePort) -> Tuple[bool, Optional[ApprovedSender]]:
    """Return (is_approved, matched_sender) for the message's sender.

    The phone number is matched through normalization against every stored
    sender. The display name is only trusted when it matches a stored name
    (case-insensitive) or a stored phone verbatim.
    """

    matched = next(
        (sender for sender in storage.list_approved_senders() if are_equal(sender.phone, message.sender_phone)),
        None,
    )
    approved_by_name = bool(message.sender_name) and storage.is_approved_name(message.sender_name)
    return matched is not None or approved_by_name, matched


class MessageProcessor:
    """Orchestrates sender resolution, classification, persistence and notifications."""

    def __init__(
        self,
        storage: StoragePort,
        notifier: NotifierPort,
        engine_config: Optional[EngineConfig] = None,
        notification_config: Optional[NotificationConfig] = None,
    ) -> None:
        self._storage = storage
        self._notifier = notifier
        self._engine = engine_config or EngineConfig()
        self._notifications = notification_config or NotificationConfig()

    async def handle(self, message: Message) -> Decision:
        """Process one message through the pipeline and return its decision."""

        is_approved, matched = resolve_sender(message, self._storage)
        LOGGER.debug(
            "Sender %s (normalized %s) approved=%s",
            message.sender_phone,
            normalize(message.sender_phone),
            is_approved,
        )

        if self._engine.strict_mode and not is_approved:
            LOGGER.info("Strict mode: discarding message from unapproved sender %s", message.sender_phone)
            return Discard()

        # The stored friendly name wins over whatever the platform reported,
        # so vouchers from one sender are grouped under one merchant name.
        display_name = (matched.name if matched else None) or message.sender_name
        if display_name != message.sender_name:
            message = replace(message, sender_name=display_name)

        decision = classify(
            message,
            is_approved,
            self._storage.list_trusted_domains(),
            hard_spam_filter=self._engine.hard_spam_filter,
        )

        if isinstance(decision, Approved):
            record = VoucherRecord.from_decision_data(message, decision.extracted_data, STATUS_APPROVED)
            voucher_id = self._storage.save_voucher(record)
            LOGGER.info("Approved voucher %s saved (merchant=%s)", voucher_id, record.merchant_name)
            if self._notifications.notify_approved:
                await self._notifier.voucher_approved(replace(record, id=voucher_id))
        elif isinstance(decision, Pending):
            record = VoucherRecord.from_decision_data(message, decision.extracted_data, STATUS_PENDING)
            voucher_id = self._storage.save_voucher(record)
            LOGGER.info("Pending voucher %s saved for review", voucher_id)
            if self._notifications.notify_pending:
                await self._notifier.pending_review(replace(record, id=voucher_id))
        elif isinstance(decision, Discard):
            LOGGER.info("Discarded message from %s", message.sender_phone)
        else:
            assert_never(decision)

        return decision
