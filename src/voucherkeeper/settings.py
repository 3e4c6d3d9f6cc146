"""Static configuration for voucherkeeper.

All user-editable settings (database, strict mode, notifications, logging)
live in a single JSON file for quick edits without touching Python.
"""

import json
import os

PROJECT_ROOT = os.getcwd()

# config.json next to where the tool runs, unless VOUCHERKEEPER_CONFIG points
# elsewhere. A missing file means every setting keeps its default.
CONFIG_PATH = os.getenv("VOUCHERKEEPER_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    """Resolve relative paths against the directory holding config.json."""

    if os.path.isabs(path):
        return path
    return os.path.join(os.path.dirname(os.path.abspath(CONFIG_PATH)), path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database.
DB_PATH = _resolve_path(_CONFIG.get("db_path", "voucherkeeper.db"))

# Classification controls.
# - STRICT_MODE: discard everything from senders not on the approved list
# - HARD_SPAM_FILTER: discard newsletter phrasing even next to voucher words
_classifier = _CONFIG.get("classifier", {})
STRICT_MODE = bool(_classifier.get("strict_mode", False))
HARD_SPAM_FILTER = bool(_classifier.get("hard_spam_filter", False))
# Seed the trusted_domains table with the default portals on first run.
SEED_TRUSTED_DOMAINS = bool(_classifier.get("seed_trusted_domains", True))

# Notification method switches adapters without changing core logic.
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "log")
# Bot chat id is only required when notification_method=bot.
BOT_CHAT_ID = _notifications.get("bot_chat_id")
NOTIFY_APPROVED = bool(_notifications.get("notify_approved", True))
NOTIFY_PENDING = bool(_notifications.get("notify_pending", True))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
