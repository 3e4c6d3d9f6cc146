from __future__ import annotations

import asyncio
from typing import List, Optional

from voucherkeeper.core.config import EngineConfig, NotificationConfig
from voucherkeeper.core.models import ApprovedSender, Approved, Discard, Message, Pending, VoucherRecord
from voucherkeeper.core.processor import MessageProcessor, resolve_sender

VOUCHER_WITH_CODE = "קיבלת שובר מתנה! קוד: ABCD1234"
VOUCHER_WITH_CUSTOM_LINK = "קיבלת שובר דיגיטלי https://mygift.example.com/a1"


class FakeStorage:
    def __init__(
        self,
        senders: Optional[List[ApprovedSender]] = None,
        domains: Optional[List[str]] = None,
    ) -> None:
        self.senders = senders or []
        self.domains = domains or []
        self.saved: list[VoucherRecord] = []

    def list_approved_senders(self) -> List[ApprovedSender]:
        return list(self.senders)

    def is_approved_name(self, name: str) -> bool:
        return any(
            (sender.name or "").lower() == name.lower() or sender.phone == name
            for sender in self.senders
        )

    def list_trusted_domains(self) -> List[str]:
        return list(self.domains)

    def save_voucher(self, record: VoucherRecord) -> int:
        self.saved.append(record)
        return len(self.saved)


class FakeNotifier:
    def __init__(self) -> None:
        self.approved: list[VoucherRecord] = []
        self.pending: list[VoucherRecord] = []

    async def voucher_approved(self, record: VoucherRecord) -> None:
        self.approved.append(record)

    async def pending_review(self, record: VoucherRecord) -> None:
        self.pending.append(record)


def _message(body: str, phone: str = "+972-50-111-2222", sender_name: Optional[str] = None) -> Message:
    return Message(sender_phone=phone, sender_name=sender_name, body_text=body, timestamp=1_700_000_000_000)


def test_approved_by_normalized_phone_uses_stored_name() -> None:
    storage = FakeStorage(senders=[ApprovedSender(phone="054-219-9006", name="Shufersal")])
    notifier = FakeNotifier()
    processor = MessageProcessor(storage=storage, notifier=notifier)

    decision = asyncio.run(processor.handle(_message(VOUCHER_WITH_CODE, phone="+972542199006")))

    assert isinstance(decision, Approved)
    assert decision.extracted_data.merchant_name == "Shufersal"
    assert len(storage.saved) == 1
    saved = storage.saved[0]
    assert saved.status == "approved"
    assert saved.sender_phone == "+972542199006"
    assert saved.sender_name == "Shufersal"
    assert saved.raw_message == VOUCHER_WITH_CODE
    assert notifier.approved[0].id == 1
    assert not notifier.pending


def test_approved_by_display_name() -> None:
    storage = FakeStorage(senders=[ApprovedSender(phone="0501234567", name="Shufersal")])
    notifier = FakeNotifier()
    processor = MessageProcessor(storage=storage, notifier=notifier)

    message = _message(VOUCHER_WITH_CODE, phone="SHUFERSAL", sender_name="shufersal")
    decision = asyncio.run(processor.handle(message))

    assert isinstance(decision, Approved)
    assert decision.extracted_data.merchant_name == "shufersal"


def test_unknown_sender_is_pending_and_notified() -> None:
    storage = FakeStorage()
    notifier = FakeNotifier()
    processor = MessageProcessor(storage=storage, notifier=notifier)

    decision = asyncio.run(processor.handle(_message(VOUCHER_WITH_CODE)))

    assert isinstance(decision, Pending)
    assert storage.saved[0].status == "pending"
    assert len(notifier.pending) == 1
    assert not notifier.approved


def test_strict_mode_discards_unknown_sender_without_saving() -> None:
    storage = FakeStorage()
    notifier = FakeNotifier()
    processor = MessageProcessor(
        storage=storage,
        notifier=notifier,
        engine_config=EngineConfig(strict_mode=True),
    )

    decision = asyncio.run(processor.handle(_message(VOUCHER_WITH_CODE)))

    assert decision == Discard()
    assert not storage.saved
    assert not notifier.pending


def test_strict_mode_still_accepts_approved_sender() -> None:
    storage = FakeStorage(senders=[ApprovedSender(phone="0501112222")])
    processor = MessageProcessor(
        storage=storage,
        notifier=FakeNotifier(),
        engine_config=EngineConfig(strict_mode=True),
    )

    decision = asyncio.run(processor.handle(_message(VOUCHER_WITH_CODE)))

    assert isinstance(decision, Approved)


def test_stored_trusted_domains_extend_access_points() -> None:
    without_domain = MessageProcessor(storage=FakeStorage(), notifier=FakeNotifier())
    with_domain = MessageProcessor(
        storage=FakeStorage(domains=["mygift.example.com"]),
        notifier=FakeNotifier(),
    )

    assert asyncio.run(without_domain.handle(_message(VOUCHER_WITH_CUSTOM_LINK))) == Discard()
    assert isinstance(asyncio.run(with_domain.handle(_message(VOUCHER_WITH_CUSTOM_LINK))), Pending)


def test_discard_neither_saves_nor_notifies() -> None:
    storage = FakeStorage(senders=[ApprovedSender(phone="0501112222")])
    notifier = FakeNotifier()
    processor = MessageProcessor(storage=storage, notifier=notifier)

    decision = asyncio.run(processor.handle(_message("מבצע! 1+1 על כל הפיצות")))

    assert decision == Discard()
    assert not storage.saved
    assert not notifier.approved and not notifier.pending


def test_notifications_can_be_disabled_per_outcome() -> None:
    storage = FakeStorage()
    notifier = FakeNotifier()
    processor = MessageProcessor(
        storage=storage,
        notifier=notifier,
        notification_config=NotificationConfig(notify_pending=False),
    )

    asyncio.run(processor.handle(_message(VOUCHER_WITH_CODE)))

    assert len(storage.saved) == 1
    assert not notifier.pending


def test_resolve_sender_ignores_unmatched_display_name() -> None:
    storage = FakeStorage(senders=[ApprovedSender(phone="0501234567", name="Shufersal")])
    is_approved, matched = resolve_sender(_message("hi", sender_name="Cibus"), storage)
    assert not is_approved
    assert matched is None
