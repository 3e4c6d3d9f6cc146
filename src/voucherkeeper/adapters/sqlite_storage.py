"""SQLite storage adapter.

Implements the core StoragePort using a simple SQLite database, plus the
management operations used by the CLI (senders, domains, review queue).
"""

from __future__ import annotations

import sqlite3
import time
from typing import Iterable, List, Optional

from voucherkeeper.core.models import (
    MANUAL_RAW_MESSAGE,
    MANUAL_SENDER,
    STATUS_APPROVED,
    STATUS_PENDING,
    ApprovedSender,
    VoucherRecord,
)
from voucherkeeper.core.phone import are_equal

# Seeded into trusted_domains the first time the database is created so the
# user has editable starting entries in addition to the built-in list.
DEFAULT_TRUSTED_DOMAINS = (
    "myconsumers.pluxee.co.il",
    "cibus.pluxee.co.il",
    "pluxee.co.il",
    "edenred.co.il",
    "shufersal.co.il",
)


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the StoragePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - vouchers: approved and pending vouchers
        - approved_senders: whitelisted senders by phone
        - trusted_domains: user-managed redemption domains
        """

        with self._connect() as conn:
            # vouchers keeps the extracted fields next to the untouched raw
            # message so the user can correct a bad extraction later.
            # Fields:
            # - status: "approved" or "pending"
            # - amount: matched text as written in the SMS, e.g. "100 ₪"
            # - timestamp: SMS reception time in epoch millis
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS vouchers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    status TEXT NOT NULL,
                    merchant_name TEXT,
                    amount TEXT,
                    voucher_url TEXT,
                    redeem_code TEXT,
                    sender_phone TEXT NOT NULL,
                    sender_name TEXT,
                    raw_message TEXT NOT NULL,
                    timestamp INTEGER NOT NULL
                )
                """
            )
            # Phones are stored as the user typed them; matching goes through
            # phone normalization in the processor.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS approved_senders (
                    phone TEXT PRIMARY KEY,
                    name TEXT
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS trusted_domains (
                    domain TEXT PRIMARY KEY
                )
                """
            )

    def seed_trusted_domains(self, domains: Iterable[str] = DEFAULT_TRUSTED_DOMAINS) -> int:
        """Insert default domains only when the table is empty; return count added."""

        with self._connect() as conn:
            existing = conn.execute("SELECT COUNT(*) FROM trusted_domains").fetchone()[0]
            if existing:
                return 0
            cur = conn.executemany(
                "INSERT OR IGNORE INTO trusted_domains (domain) VALUES (?)",
                [(domain.lower(),) for domain in domains],
            )
            return cur.rowcount

    # Approved senders

    def list_approved_senders(self) -> List[ApprovedSender]:
        with self._connect() as conn:
            rows = conn.execute("SELECT phone, name FROM approved_senders ORDER BY name ASC").fetchall()
        return [ApprovedSender(phone=row["phone"], name=row["name"]) for row in rows]

    def is_approved_name(self, name: str) -> bool:
        """Return True if name matches a stored sender name or phone."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM approved_senders WHERE LOWER(name) = LOWER(?) OR phone = ?",
                (name, name),
            ).fetchone()
        return row is not None

    def add_approved_sender(self, phone: str, name: Optional[str] = None) -> None:
        """Upsert an approved sender."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO approved_senders (phone, name)
                VALUES (?, ?)
                ON CONFLICT(phone) DO UPDATE SET name = excluded.name
                """,
                (phone, name),
            )

    def remove_approved_sender(self, phone: str) -> int:
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM approved_senders WHERE phone = ?", (phone,))
            return cur.rowcount

    # Trusted domains

    def list_trusted_domains(self) -> List[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT domain FROM trusted_domains ORDER BY domain ASC").fetchall()
        return [row["domain"] for row in rows]

    def add_trusted_domain(self, domain: str) -> None:
        domain = domain.strip().lower()
        if not domain:
            raise ValueError("domain must not be empty")
        with self._connect() as conn:
            conn.execute("INSERT OR IGNORE INTO trusted_domains (domain) VALUES (?)", (domain,))

    def remove_trusted_domain(self, domain: str) -> int:
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM trusted_domains WHERE domain = ?", (domain.strip().lower(),))
            return cur.rowcount

    # Vouchers

    def save_voucher(self, record: VoucherRecord) -> int:
        """Persist a voucher and return its id."""

        with self._connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO vouchers (
                    status,
                    merchant_name,
                    amount,
                    voucher_url,
                    redeem_code,
                    sender_phone,
                    sender_name,
                    raw_message,
                    timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.status,
                    record.merchant_name,
                    record.amount,
                    record.voucher_url,
                    record.redeem_code,
                    record.sender_phone,
                    record.sender_name,
                    record.raw_message,
                    record.timestamp,
                ),
            )
            return int(cur.lastrowid)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> VoucherRecord:
        return VoucherRecord(
            id=row["id"],
            status=row["status"],
            merchant_name=row["merchant_name"],
            amount=row["amount"],
            voucher_url=row["voucher_url"],
            redeem_code=row["redeem_code"],
            sender_phone=row["sender_phone"],
            sender_name=row["sender_name"],
            raw_message=row["raw_message"],
            timestamp=row["timestamp"],
        )

    def list_vouchers(self, status: Optional[str] = None) -> List[VoucherRecord]:
        """Return vouchers newest first, optionally filtered by status."""

        query = "SELECT * FROM vouchers"
        params: tuple = ()
        if status:
            query += " WHERE status = ?"
            params = (status,)
        query += " ORDER BY timestamp DESC, id DESC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_voucher(self, voucher_id: int) -> Optional[VoucherRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM vouchers WHERE id = ?", (voucher_id,)).fetchone()
        return self._row_to_record(row) if row else None

    def pending_count(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM vouchers WHERE status = ?", (STATUS_PENDING,)).fetchone()[0]

    def approve_voucher(self, voucher_id: int) -> bool:
        """Move a pending voucher to the approved list."""

        with self._connect() as conn:
            cur = conn.execute(
                "UPDATE vouchers SET status = ? WHERE id = ?",
                (STATUS_APPROVED, voucher_id),
            )
            return cur.rowcount > 0

    def delete_voucher(self, voucher_id: int) -> bool:
        """Delete a voucher; rejecting a pending voucher is a delete."""

        with self._connect() as conn:
            cur = conn.execute("DELETE FROM vouchers WHERE id = ?", (voucher_id,))
            return cur.rowcount > 0

    def delete_all_pending(self) -> int:
        """Reject the whole review queue; return the number of vouchers removed."""

        with self._connect() as conn:
            cur = conn.execute("DELETE FROM vouchers WHERE status = ?", (STATUS_PENDING,))
            return cur.rowcount

    def add_manual_voucher(
        self,
        merchant_name: str,
        amount: Optional[str] = None,
        voucher_url: Optional[str] = None,
        redeem_code: Optional[str] = None,
        sender_phone: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> int:
        """Store a user-entered voucher directly as approved and return its id."""

        record = VoucherRecord(
            status=STATUS_APPROVED,
            sender_phone=sender_phone or MANUAL_SENDER,
            raw_message=MANUAL_RAW_MESSAGE,
            timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
            merchant_name=merchant_name,
            amount=amount,
            voucher_url=voucher_url,
            redeem_code=redeem_code,
        )
        return self.save_voucher(record)

    def update_voucher(
        self,
        voucher_id: int,
        sender_name: Optional[str] = None,
        amount: Optional[str] = None,
        merchant_name: Optional[str] = None,
        voucher_url: Optional[str] = None,
        redeem_code: Optional[str] = None,
    ) -> bool:
        """Edit the extracted fields of a voucher.

        None or blank values keep the current field. raw_message and status
        are never changed here. Returns False when the voucher does not exist.
        """

        current = self.get_voucher(voucher_id)
        if current is None:
            return False

        def pick(new: Optional[str], old: Optional[str]) -> Optional[str]:
            return new if new and new.strip() else old

        with self._connect() as conn:
            conn.execute(
                """
                UPDATE vouchers
                SET sender_name = ?, amount = ?, merchant_name = ?, voucher_url = ?, redeem_code = ?
                WHERE id = ?
                """,
                (
                    pick(sender_name, current.sender_name),
                    pick(amount, current.amount),
                    pick(merchant_name, current.merchant_name),
                    pick(voucher_url, current.voucher_url),
                    pick(redeem_code, current.redeem_code),
                    voucher_id,
                ),
            )
        return True

    def sync_sender_name(self, phone: str, name: Optional[str]) -> int:
        """Set sender_name on every voucher whose phone matches after normalization."""

        updated = 0
        with self._connect() as conn:
            rows = conn.execute("SELECT id, sender_phone FROM vouchers").fetchall()
            for row in rows:
                if not are_equal(row["sender_phone"], phone):
                    continue
                conn.execute("UPDATE vouchers SET sender_name = ? WHERE id = ?", (name, row["id"]))
                updated += 1
        return updated
