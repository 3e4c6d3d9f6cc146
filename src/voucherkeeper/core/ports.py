"""Ports (interfaces) used by the message processor.

Ports define the minimal contracts for storage and notification adapters so
that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Protocol

from voucherkeeper.core.models import ApprovedSender, VoucherRecord


class StoragePort(Protocol):
    """Storage operations required by the message processor."""

    def list_approved_senders(self) -> List[ApprovedSender]:
        ...

    def is_approved_name(self, name: str) -> bool:
        ...

    def list_trusted_domains(self) -> List[str]:
        ...

    def save_voucher(self, record: VoucherRecord) -> int:
        ...


class NotifierPort(Protocol):
    """Notification operations required by the message processor."""

    async def voucher_approved(self, record: VoucherRecord) -> None:
        ...

    async def pending_review(self, record: VoucherRecord) -> None:
        ...
