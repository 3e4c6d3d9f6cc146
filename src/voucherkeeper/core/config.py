"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Classification settings for the message processor."""

    strict_mode: bool = False
    hard_spam_filter: bool = False


@dataclass(frozen=True)
class NotificationConfig:
    """Which decisions trigger a notification."""

    notify_approved: bool = True
    notify_pending: bool = True
