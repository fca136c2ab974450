"""SQLite-backed persistence for storefront accounts and reset codes."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Mapping, Optional

from .models import Account, AccountStatus, ResetCode, check_transition


class StoreError(RuntimeError):
    """Raised when the account store cannot complete an operation."""


class DuplicateEmailError(StoreError):
    """Raised when an insert collides with the unique email constraint."""


ACCOUNT_FIELDS = ("name", "email", "company_name", "address", "phone_number", "password_hash")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the storefront database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "storefront.sqlite3").resolve(strict=False)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Database:
    """Thin wrapper around SQLite for the account and verification-code tables.

    Every method opens its own connection so the object can be shared across
    worker threads. Each connection is a transaction: a failure rolls the whole
    statement group back and the connection is closed afterwards.
    """

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS catalog_users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    company_name TEXT NOT NULL,
                    address TEXT NOT NULL,
                    phone_number TEXT NOT NULL,
                    password_hash TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'approved', 'rejected')),
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS verification_codes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT NOT NULL,
                    code TEXT NOT NULL,
                    expires_at TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    used_at TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_verification_codes_email
                    ON verification_codes(email);
                CREATE INDEX IF NOT EXISTS idx_catalog_users_status
                    ON catalog_users(status);
                """
            )

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def find_account_by_email(self, email: str) -> Optional[Account]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM catalog_users WHERE email = ?",
                    (email,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError("Failed to look up account") from exc
        if row is None:
            return None
        return self._row_to_account(row)

    def get_account(self, account_id: int) -> Optional[Account]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM catalog_users WHERE id = ?",
                    (account_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError("Failed to load account") from exc
        if row is None:
            return None
        return self._row_to_account(row)

    def insert_account(self, fields: Mapping[str, str]) -> Account:
        """Insert a new pending account and return the stored record."""

        missing = [name for name in ACCOUNT_FIELDS if not fields.get(name)]
        if missing:
            raise ValueError(f"Missing account fields: {', '.join(missing)}")

        created_at = _current_timestamp()
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO catalog_users (
                        name,
                        email,
                        company_name,
                        address,
                        phone_number,
                        password_hash,
                        status,
                        created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        fields["name"],
                        fields["email"],
                        fields["company_name"],
                        fields["address"],
                        fields["phone_number"],
                        fields["password_hash"],
                        AccountStatus.PENDING.value,
                        _serialize_datetime(created_at),
                    ),
                )
                account_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise DuplicateEmailError("An account with that email already exists") from exc
        except sqlite3.Error as exc:
            raise StoreError("Failed to insert account") from exc

        account = self.get_account(account_id)
        if account is None:
            raise StoreError("Failed to load account after creation")
        return account

    def set_account_status(self, email: str, status: AccountStatus) -> Account:
        """Apply an administrative approval decision to an account."""

        account = self.find_account_by_email(email)
        if account is None:
            raise ValueError("Account not found")
        check_transition(account.status, status)

        try:
            with self._connect() as conn:
                conn.execute(
                    "UPDATE catalog_users SET status = ? WHERE id = ?",
                    (status.value, account.id),
                )
        except sqlite3.Error as exc:
            raise StoreError("Failed to update account status") from exc

        refreshed = self.get_account(account.id)
        if refreshed is None:
            raise StoreError("Account vanished while updating status")
        return refreshed

    def list_accounts(self, status: Optional[AccountStatus] = None) -> List[Account]:
        query = "SELECT * FROM catalog_users"
        params: tuple = ()
        if status is not None:
            query += " WHERE status = ?"
            params = (status.value,)
        query += " ORDER BY created_at, id"
        try:
            with self._connect() as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise StoreError("Failed to list accounts") from exc
        return [self._row_to_account(row) for row in rows]

    # ------------------------------------------------------------------
    # Reset codes
    # ------------------------------------------------------------------
    def insert_reset_code(
        self,
        email: str,
        code: str,
        expires_at: datetime,
        *,
        created_at: Optional[datetime] = None,
    ) -> ResetCode:
        if not email or not code:
            raise ValueError("Reset codes require an email and a code")

        created_at = created_at or _current_timestamp()
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO verification_codes (email, code, expires_at, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (email, code, _serialize_datetime(expires_at), _serialize_datetime(created_at)),
                )
                code_id = cursor.lastrowid
        except sqlite3.Error as exc:
            raise StoreError("Failed to store reset code") from exc

        return ResetCode(
            id=int(code_id),
            email=email,
            code=code,
            expires_at=expires_at,
            created_at=created_at,
        )

    def find_active_reset_code(self, email: str, code: str, now: datetime) -> Optional[ResetCode]:
        """Return the newest unused, unexpired code matching ``email`` and ``code``."""

        try:
            with self._connect() as conn:
                row = conn.execute(
                    """
                    SELECT * FROM verification_codes
                     WHERE email = ? AND code = ? AND used_at IS NULL AND expires_at > ?
                     ORDER BY id DESC
                     LIMIT 1
                    """,
                    (email, code, _serialize_datetime(now)),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError("Failed to look up reset code") from exc
        if row is None:
            return None
        return self._row_to_reset_code(row)

    def redeem_reset_code(self, code_id: int, email: str, password_hash: str, now: datetime) -> bool:
        """Consume a reset code and replace the account's password hash atomically.

        Returns ``False`` if the code was already used or has expired in the
        meantime; nothing is written in that case.
        """

        if not password_hash:
            raise ValueError("Password hash must not be empty")

        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    UPDATE verification_codes
                       SET used_at = ?
                     WHERE id = ? AND email = ? AND used_at IS NULL AND expires_at > ?
                    """,
                    (_serialize_datetime(now), code_id, email, _serialize_datetime(now)),
                )
                if cursor.rowcount == 0:
                    return False
                updated = conn.execute(
                    "UPDATE catalog_users SET password_hash = ? WHERE email = ?",
                    (password_hash, email),
                )
                if updated.rowcount == 0:
                    conn.rollback()
                    return False
        except sqlite3.Error as exc:
            raise StoreError("Failed to redeem reset code") from exc
        return True

    def list_reset_codes(self, email: str) -> List[ResetCode]:
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT * FROM verification_codes WHERE email = ? ORDER BY id",
                    (email,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError("Failed to list reset codes") from exc
        return [self._row_to_reset_code(row) for row in rows]

    def purge_expired_reset_codes(self, now: Optional[datetime] = None) -> int:
        """Delete codes that are expired or already consumed; return the count."""

        cutoff = _serialize_datetime(now or _current_timestamp())
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM verification_codes WHERE expires_at <= ? OR used_at IS NOT NULL",
                    (cutoff,),
                )
                return cursor.rowcount
        except sqlite3.Error as exc:
            raise StoreError("Failed to purge reset codes") from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _row_to_account(self, row: sqlite3.Row) -> Account:
        return Account(
            id=int(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            company_name=str(row["company_name"]),
            address=str(row["address"]),
            phone_number=str(row["phone_number"]),
            password_hash=str(row["password_hash"]),
            status=AccountStatus(row["status"]),
            created_at=_parse_datetime(str(row["created_at"])),
        )

    def _row_to_reset_code(self, row: sqlite3.Row) -> ResetCode:
        used_at = row["used_at"]
        return ResetCode(
            id=int(row["id"]),
            email=str(row["email"]),
            code=str(row["code"]),
            expires_at=_parse_datetime(str(row["expires_at"])),
            created_at=_parse_datetime(str(row["created_at"])),
            used_at=_parse_datetime(str(used_at)) if used_at else None,
        )


__all__ = [
    "ACCOUNT_FIELDS",
    "Database",
    "DuplicateEmailError",
    "StoreError",
    "resolve_database_path",
]
