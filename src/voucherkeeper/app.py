"""Application entry point for the voucherkeeper CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional, assert_never

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from voucherkeeper import settings
from voucherkeeper.adapters.log_notifier import LogNotifier
from voucherkeeper.adapters.sms_mapper import message_from_dict
from voucherkeeper.adapters.sqlite_storage import SQLiteStorage
from voucherkeeper.adapters.telegram_bot_notifier import TelegramBotNotifier
from voucherkeeper.core.config import EngineConfig, NotificationConfig
from voucherkeeper.core.decision import classify
from voucherkeeper.core.extractor import extract_from_text
from voucherkeeper.core.models import Approved, Decision, Discard, ExtractedData, Message, Pending
from voucherkeeper.core.ports import NotifierPort
from voucherkeeper.core.processor import MessageProcessor

NAME = "VOUCHERKEEPER"
FONT = "tarty-1"

console = Console()


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/voucherkeeper.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_storage() -> SQLiteStorage:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    if settings.SEED_TRUSTED_DOMAINS:
        seeded = storage.seed_trusted_domains()
        if seeded:
            logging.getLogger(__name__).info("Seeded %s trusted domains", seeded)
    return storage


def _build_notifier() -> NotifierPort:
    # Select the notification adapter based on configuration to keep the core
    # processor independent from delivery details.
    if settings.NOTIFICATION_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when notification_method=bot")
        if not settings.BOT_CHAT_ID:
            raise RuntimeError("notifications.bot_chat_id is required for bot notifications")
        return TelegramBotNotifier(bot_token=bot_token, chat_id=str(settings.BOT_CHAT_ID))
    if settings.NOTIFICATION_METHOD == "log":
        return LogNotifier()
    raise RuntimeError("notification_method must be 'log' or 'bot'")


def build_processor(storage: SQLiteStorage) -> MessageProcessor:
    return MessageProcessor(
        storage=storage,
        notifier=_build_notifier(),
        engine_config=EngineConfig(
            strict_mode=settings.STRICT_MODE,
            hard_spam_filter=settings.HARD_SPAM_FILTER,
        ),
        notification_config=NotificationConfig(
            notify_approved=settings.NOTIFY_APPROVED,
            notify_pending=settings.NOTIFY_PENDING,
        ),
    )


async def process_lines(processor: MessageProcessor, lines: Iterable[str]) -> dict[str, int]:
    """Process JSON-lines messages one at a time and count decisions."""

    logger = logging.getLogger(__name__)
    counts = {"approved": 0, "pending": 0, "discard": 0, "skipped": 0}
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            message = message_from_dict(json.loads(line))
        except (ValueError, TypeError, AttributeError):
            logger.warning("Skipping malformed message on line %s", line_number)
            counts["skipped"] += 1
            continue
        try:
            decision = await processor.handle(message)
        except Exception:
            logger.exception("Error while processing message on line %s", line_number)
            counts["skipped"] += 1
            continue
        counts[decision_label(decision)] += 1
    return counts


def decision_label(decision: Decision) -> str:
    if isinstance(decision, Approved):
        return "approved"
    if isinstance(decision, Pending):
        return "pending"
    if isinstance(decision, Discard):
        return "discard"
    assert_never(decision)


def _print_extracted(title: str, data: Optional[ExtractedData]) -> None:
    table = Table(title=title, show_header=False)
    table.add_column("field")
    table.add_column("value")
    if data is not None:
        table.add_row("merchant", data.merchant_name or "-")
        table.add_row("amount", data.amount or "-")
        table.add_row("url", data.voucher_url or "-")
        table.add_row("code", data.redeem_code or "-")
    console.print(table)


def _run(input_path: Optional[str]) -> None:
    _print_banner()
    logger = logging.getLogger(__name__)
    logger.info("Starting voucherkeeper")

    storage = _open_storage()
    processor = build_processor(storage)
    logger.info("Selected notification method - %s", settings.NOTIFICATION_METHOD)

    if input_path and input_path != "-":
        with open(input_path, "r", encoding="utf-8") as handle:
            counts = asyncio.run(process_lines(processor, handle))
    else:
        counts = asyncio.run(process_lines(processor, sys.stdin))

    logger.info(
        "Run complete: approved=%s, pending=%s, discarded=%s, skipped=%s",
        counts["approved"],
        counts["pending"],
        counts["discard"],
        counts["skipped"],
    )
    console.print(counts)


def _classify(args: argparse.Namespace) -> None:
    message = Message(
        sender_phone=args.sender,
        sender_name=args.name,
        body_text=args.text,
        timestamp=0,
    )
    decision = classify(message, args.approved, args.domain or [], hard_spam_filter=args.hard_spam)
    label = decision_label(decision)
    data = None if isinstance(decision, Discard) else decision.extracted_data
    _print_extracted(f"Decision: {label}", data)


def _extract(args: argparse.Namespace) -> None:
    _print_extracted("Extracted", extract_from_text(args.text))


def _senders(args: argparse.Namespace) -> None:
    storage = _open_storage()
    if args.action == "add":
        storage.add_approved_sender(args.phone, args.name)
        synced = storage.sync_sender_name(args.phone, args.name)
        console.print(f"Added {args.phone} ({synced} vouchers renamed)")
    elif args.action == "remove":
        removed = storage.remove_approved_sender(args.phone)
        console.print(f"Removed {removed} sender(s)")
    else:
        table = Table(title="Approved senders")
        table.add_column("phone")
        table.add_column("name")
        for sender in storage.list_approved_senders():
            table.add_row(sender.phone, sender.name or "")
        console.print(table)


def _domains(args: argparse.Namespace) -> None:
    storage = _open_storage()
    if args.action == "add":
        storage.add_trusted_domain(args.domain)
        console.print(f"Added {args.domain}")
    elif args.action == "remove":
        removed = storage.remove_trusted_domain(args.domain)
        console.print(f"Removed {removed} domain(s)")
    else:
        table = Table(title="Trusted domains")
        table.add_column("domain")
        for domain in storage.list_trusted_domains():
            table.add_row(domain)
        console.print(table)


def _manual_voucher_fields(args: argparse.Namespace) -> dict[str, Optional[str]]:
    """Merge --from-text extraction with explicit flags; flags win."""

    extracted = extract_from_text(args.from_text) if args.from_text else ExtractedData(raw_message="")
    fields = {
        "merchant_name": args.merchant or extracted.merchant_name,
        "amount": args.amount or extracted.amount,
        "voucher_url": args.url or extracted.voucher_url,
        "redeem_code": args.code or extracted.redeem_code,
        "sender_phone": args.phone,
    }
    if not fields["merchant_name"]:
        raise SystemExit("A merchant name is required: pass --merchant or text naming a known merchant")
    return fields


def _vouchers(args: argparse.Namespace) -> None:
    storage = _open_storage()
    if args.action == "approve":
        ok = storage.approve_voucher(args.id)
        console.print("Approved" if ok else f"No voucher with id {args.id}")
        return
    if args.action == "delete":
        ok = storage.delete_voucher(args.id)
        console.print("Deleted" if ok else f"No voucher with id {args.id}")
        return
    if args.action == "clear-pending":
        removed = storage.delete_all_pending()
        console.print(f"Removed {removed} pending voucher(s)")
        return
    if args.action == "add":
        voucher_id = storage.add_manual_voucher(**_manual_voucher_fields(args))
        console.print(f"Added voucher {voucher_id}")
        return
    if args.action == "edit":
        ok = storage.update_voucher(
            args.id,
            sender_name=args.name,
            amount=args.amount,
            merchant_name=args.merchant,
            voucher_url=args.url,
            redeem_code=args.code,
        )
        console.print("Updated" if ok else f"No voucher with id {args.id}")
        return

    table = Table(title=f"Vouchers ({storage.pending_count()} pending)")
    for column in ("id", "status", "merchant", "amount", "code", "url", "sender"):
        table.add_column(column)
    for record in storage.list_vouchers(args.status):
        table.add_row(
            str(record.id),
            record.status,
            record.merchant_name or "",
            record.amount or "",
            record.redeem_code or "",
            record.voucher_url or "",
            record.sender_name or record.sender_phone,
        )
    console.print(table)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="voucherkeeper")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Classify JSON-lines messages from a file or stdin")
    run_parser.add_argument("--input", help="JSON-lines file, '-' or omitted for stdin")

    classify_parser = subparsers.add_parser("classify", help="Classify one message without storing it")
    classify_parser.add_argument("text")
    classify_parser.add_argument("--sender", default="unknown")
    classify_parser.add_argument("--name")
    classify_parser.add_argument("--approved", action="store_true", help="Treat the sender as approved")
    classify_parser.add_argument("--domain", action="append", help="Extra trusted domain (repeatable)")
    classify_parser.add_argument("--hard-spam", action="store_true", help="Enable the hard-spam pre-filter")

    extract_parser = subparsers.add_parser("extract", help="Extract voucher fields from pasted text")
    extract_parser.add_argument("text")

    senders_parser = subparsers.add_parser("senders", help="Manage approved senders")
    senders_sub = senders_parser.add_subparsers(dest="action")
    senders_sub.add_parser("list")
    add_sender = senders_sub.add_parser("add")
    add_sender.add_argument("phone")
    add_sender.add_argument("--name")
    remove_sender = senders_sub.add_parser("remove")
    remove_sender.add_argument("phone")

    domains_parser = subparsers.add_parser("domains", help="Manage trusted domains")
    domains_sub = domains_parser.add_subparsers(dest="action")
    domains_sub.add_parser("list")
    domains_sub.add_parser("add").add_argument("domain")
    domains_sub.add_parser("remove").add_argument("domain")

    vouchers_parser = subparsers.add_parser("vouchers", help="Review stored vouchers")
    vouchers_sub = vouchers_parser.add_subparsers(dest="action")
    list_vouchers = vouchers_sub.add_parser("list")
    list_vouchers.add_argument("--status", choices=["approved", "pending"])
    vouchers_sub.add_parser("approve").add_argument("id", type=int)
    vouchers_sub.add_parser("delete").add_argument("id", type=int)
    vouchers_sub.add_parser("clear-pending", help="Delete every pending voucher")

    add_voucher = vouchers_sub.add_parser("add", help="Store a voucher typed in by hand as approved")
    add_voucher.add_argument("--from-text", help="Pre-fill fields by extracting from pasted text")
    add_voucher.add_argument("--merchant")
    add_voucher.add_argument("--amount")
    add_voucher.add_argument("--url")
    add_voucher.add_argument("--code")
    add_voucher.add_argument("--phone")

    edit_voucher = vouchers_sub.add_parser("edit", help="Correct stored fields; omitted values stay")
    edit_voucher.add_argument("id", type=int)
    edit_voucher.add_argument("--name", help="Sender display name")
    edit_voucher.add_argument("--amount")
    edit_voucher.add_argument("--merchant")
    edit_voucher.add_argument("--url")
    edit_voucher.add_argument("--code")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    load_dotenv()
    _configure_logging()

    if args.command == "classify":
        _classify(args)
        return
    if args.command == "extract":
        _extract(args)
        return
    if args.command == "senders":
        _senders(args)
        return
    if args.command == "domains":
        _domains(args)
        return
    if args.command == "vouchers":
        if args.action is None:
            args.action, args.status = "list", None
        _vouchers(args)
        return
    _run(getattr(args, "input", None))


if __name__ == "__main__":
    main()
