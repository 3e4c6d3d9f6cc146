"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any SMS-platform or storage-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

STATUS_APPROVED = "approved"
STATUS_PENDING = "pending"

# Placeholders for vouchers typed in by the user instead of received by SMS.
MANUAL_SENDER = "Manual Entry"
MANUAL_RAW_MESSAGE = "Manually added voucher"


@dataclass(frozen=True)
class Message:
    """One incoming SMS, already combined from its multipart pieces.

    sender_phone is always the real originating address and is the identity
    key. sender_name is only set when the platform resolved a saved contact
    name that differs from the phone number.
    """

    sender_phone: str
    body_text: str
    timestamp: int
    sender_name: Optional[str] = None


@dataclass(frozen=True)
class ExtractedData:
    """Best-effort voucher fields pulled out of a message body."""

    raw_message: str
    merchant_name: Optional[str] = None
    amount: Optional[str] = None
    voucher_url: Optional[str] = None
    redeem_code: Optional[str] = None


@dataclass(frozen=True)
class Approved:
    """Real voucher from an approved sender."""

    extracted_data: ExtractedData


@dataclass(frozen=True)
class Pending:
    """Looks like a voucher but the sender is unknown; needs manual review."""

    extracted_data: ExtractedData


@dataclass(frozen=True)
class Discard:
    """Promotional content or noise."""


Decision = Union[Approved, Pending, Discard]


@dataclass(frozen=True)
class ApprovedSender:
    """A whitelisted sender, keyed by phone with an optional friendly name."""

    phone: str
    name: Optional[str] = None


@dataclass(frozen=True)
class VoucherRecord:
    """Persisted representation of an approved or pending voucher."""

    status: str
    sender_phone: str
    raw_message: str
    timestamp: int
    sender_name: Optional[str] = None
    merchant_name: Optional[str] = None
    amount: Optional[str] = None
    voucher_url: Optional[str] = None
    redeem_code: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_decision_data(
        cls,
        message: Message,
        extracted: ExtractedData,
        status: str,
    ) -> "VoucherRecord":
        return cls(
            status=status,
            sender_phone=message.sender_phone,
            sender_name=message.sender_name,
            raw_message=extracted.raw_message,
            timestamp=message.timestamp,
            merchant_name=extracted.merchant_name,
            amount=extracted.amount,
            voucher_url=extracted.voucher_url,
            redeem_code=extracted.redeem_code,
        )
