"""Asynchronous adapter over the SQLite account store."""
from __future__ import annotations

from datetime import datetime
from functools import partial
from typing import Mapping, Optional

import anyio

from .database import Database
from .models import Account, ResetCode


class AccountStore:
    """Run blocking :class:`Database` calls in worker threads.

    Each coroutine performs a single store call; there is no retry and no
    locking. Errors raised by the database (``StoreError`` and
    ``DuplicateEmailError``) propagate unchanged to the awaiting workflow.
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    @property
    def database(self) -> Database:
        return self._database

    async def find_account_by_email(self, email: str) -> Optional[Account]:
        return await anyio.to_thread.run_sync(self._database.find_account_by_email, email)

    async def insert_account(self, fields: Mapping[str, str]) -> Account:
        return await anyio.to_thread.run_sync(self._database.insert_account, dict(fields))

    async def insert_reset_code(
        self,
        email: str,
        code: str,
        expires_at: datetime,
        *,
        created_at: Optional[datetime] = None,
    ) -> ResetCode:
        call = partial(
            self._database.insert_reset_code,
            email,
            code,
            expires_at,
            created_at=created_at,
        )
        return await anyio.to_thread.run_sync(call)

    async def find_active_reset_code(self, email: str, code: str, now: datetime) -> Optional[ResetCode]:
        return await anyio.to_thread.run_sync(self._database.find_active_reset_code, email, code, now)

    async def redeem_reset_code(self, code_id: int, email: str, password_hash: str, now: datetime) -> bool:
        return await anyio.to_thread.run_sync(
            self._database.redeem_reset_code, code_id, email, password_hash, now
        )


__all__ = ["AccountStore"]
