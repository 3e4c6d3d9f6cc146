"""SMS-to-core message mapping adapter.

This keeps platform-specific details (multipart PDUs, display addresses)
out of the core pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from voucherkeeper.core.models import Message


@dataclass(frozen=True)
class SmsPart:
    """One raw SMS part as delivered by the platform."""

    originating_address: str
    body: str
    timestamp: int
    display_originating_address: Optional[str] = None


def _sender_name(phone: str, display: Optional[str]) -> Optional[str]:
    # The platform reports the phone itself when no contact name is saved.
    if display and display != phone:
        return display
    return None


def combine_parts(parts: Iterable[SmsPart]) -> List[Message]:
    """Group parts by sender and join each group into one Message.

    Parts without an originating address are dropped. Within a sender the
    bodies are joined in timestamp order with no separator, and the earliest
    timestamp becomes the message timestamp.
    """

    by_sender: dict[str, List[SmsPart]] = {}
    for part in parts:
        if part.originating_address:
            by_sender.setdefault(part.originating_address, []).append(part)

    messages: List[Message] = []
    for phone, group in by_sender.items():
        display = group[0].display_originating_address
        chronological = sorted(group, key=lambda part: part.timestamp)
        messages.append(
            Message(
                sender_phone=phone,
                sender_name=_sender_name(phone, display),
                body_text="".join(part.body or "" for part in chronological),
                timestamp=chronological[0].timestamp,
            )
        )
    return messages


def message_from_dict(payload: dict[str, Any]) -> Message:
    """Build a Message from one JSON-lines record.

    Accepted keys: sender_phone (required), body_text, timestamp, sender_name.
    """

    phone = str(payload.get("sender_phone") or "").strip()
    if not phone:
        raise ValueError("sender_phone is required")
    # Only a string is a display name; other JSON values are ignored.
    name = payload.get("sender_name")
    if not isinstance(name, str):
        name = None
    return Message(
        sender_phone=phone,
        sender_name=_sender_name(phone, name),
        body_text=str(payload.get("body_text") or ""),
        timestamp=int(payload.get("timestamp") or 0),
    )
