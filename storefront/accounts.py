"""Registration, login and password-reset workflows for storefront accounts."""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import fields as dataclass_fields
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import anyio

from .database import DuplicateEmailError, StoreError
from .models import AccountStatus, RegistrationForm
from .passwords import PASSWORD_MAX_BYTES, PasswordHasher
from .results import ResultKind, WorkflowResult
from .store import AccountStore

logger = logging.getLogger("storefront.accounts")

PASSWORD_MIN_LENGTH = 6
RESET_CODE_LENGTH = 8
RESET_CODE_ALPHABET = string.ascii_uppercase + string.digits
RESET_CODE_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_reset_code(length: int = RESET_CODE_LENGTH) -> str:
    """Return a random uppercase base-36 code suitable for manual entry."""

    return "".join(secrets.choice(RESET_CODE_ALPHABET) for _ in range(length))


def _check_new_password(password: str, confirm_password: str) -> Optional[ResultKind]:
    if password != confirm_password:
        return ResultKind.PASSWORD_MISMATCH
    if len(password) < PASSWORD_MIN_LENGTH:
        return ResultKind.PASSWORD_TOO_SHORT
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return ResultKind.PASSWORD_TOO_LONG
    return None


class AccountService:
    """Account workflows backed by the asynchronous account store.

    Every public coroutine returns a :class:`WorkflowResult`; expected
    failures such as bad input, unapproved accounts and store outages are
    reported through ``result.kind`` rather than raised.
    """

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._clock = clock

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    async def register(self, form: RegistrationForm) -> WorkflowResult:
        """Validate ``form`` and persist a new pending account."""

        for field in dataclass_fields(form):
            value = getattr(form, field.name)
            if not value or not value.strip():
                return WorkflowResult(ResultKind.MISSING_FIELD, field=field.name)

        problem = _check_new_password(form.password, form.confirm_password)
        if problem is not None:
            return WorkflowResult(problem)

        email = form.email.strip()
        try:
            # Fast path only; the unique constraint on insert is authoritative.
            existing = await self._store.find_account_by_email(email)
            if existing is not None:
                return WorkflowResult(ResultKind.EMAIL_TAKEN)

            password_hash = await anyio.to_thread.run_sync(self._hasher.hash, form.password)
            account = await self._store.insert_account(
                {
                    "name": form.name.strip(),
                    "email": email,
                    "company_name": form.company_name.strip(),
                    "address": form.address.strip(),
                    "phone_number": form.phone_number.strip(),
                    "password_hash": password_hash,
                }
            )
        except DuplicateEmailError:
            logger.info("Concurrent registration for %s lost the insert race", email)
            return WorkflowResult(ResultKind.EMAIL_TAKEN)
        except StoreError:
            logger.exception("Registration for %s failed", email)
            return WorkflowResult(ResultKind.REGISTRATION_FAILED)

        logger.info("Account %s registered and awaiting approval", account.id)
        return WorkflowResult(ResultKind.REGISTRATION_SUBMITTED, account=account)

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------
    async def login(self, email: str, password: str) -> WorkflowResult:
        """Authenticate ``email``/``password`` against the stored account."""

        email = (email or "").strip()
        if not email:
            return WorkflowResult(ResultKind.INVALID_CREDENTIALS)

        try:
            account = await self._store.find_account_by_email(email)
        except StoreError:
            logger.exception("Login lookup for %s failed", email)
            return WorkflowResult(ResultKind.LOGIN_FAILED)

        if account is None:
            logger.warning("Failed login attempt for unknown email %s", email)
            return WorkflowResult(ResultKind.INVALID_CREDENTIALS)

        if account.status is AccountStatus.PENDING:
            return WorkflowResult(ResultKind.REGISTRATION_PENDING)
        if account.status is AccountStatus.REJECTED:
            return WorkflowResult(ResultKind.REGISTRATION_REJECTED)

        verified = await anyio.to_thread.run_sync(self._hasher.verify, password, account.password_hash)
        if not verified:
            logger.warning("Failed login attempt for account %s", account.id)
            return WorkflowResult(ResultKind.INVALID_CREDENTIALS)

        logger.info("Account %s signed in", account.id)
        return WorkflowResult(ResultKind.AUTHENTICATED, account=account)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------
    async def request_password_reset(self, email: str) -> WorkflowResult:
        """Issue a one-hour reset code for an existing account."""

        email = (email or "").strip()
        if not email:
            return WorkflowResult(ResultKind.MISSING_FIELD, field="email")

        try:
            account = await self._store.find_account_by_email(email)
            if account is None:
                return WorkflowResult(ResultKind.ACCOUNT_NOT_FOUND)

            issued_at = self._clock()
            record = await self._store.insert_reset_code(
                email,
                generate_reset_code(),
                issued_at + RESET_CODE_TTL,
                created_at=issued_at,
            )
        except StoreError:
            logger.exception("Reset code request for %s failed", email)
            return WorkflowResult(ResultKind.RESET_REQUEST_FAILED)

        logger.info("Issued reset code %s for account %s", record.id, account.id)
        return WorkflowResult(
            ResultKind.RESET_CODE_ISSUED,
            account=account,
            reset_code=record.code,
            expires_at=record.expires_at,
        )

    async def redeem_reset_code(
        self,
        email: str,
        code: str,
        new_password: str,
        confirm_password: str,
    ) -> WorkflowResult:
        """Consume a reset code and replace the account's password."""

        inputs = (
            ("email", email),
            ("code", code),
            ("new_password", new_password),
            ("confirm_password", confirm_password),
        )
        for name, value in inputs:
            if not value or not value.strip():
                return WorkflowResult(ResultKind.MISSING_FIELD, field=name)

        problem = _check_new_password(new_password, confirm_password)
        if problem is not None:
            return WorkflowResult(problem)

        email = email.strip()
        normalized_code = code.strip().upper()
        now = self._clock()
        try:
            record = await self._store.find_active_reset_code(email, normalized_code, now)
            if record is None:
                logger.warning("Rejected reset code for %s", email)
                return WorkflowResult(ResultKind.RESET_CODE_INVALID)

            password_hash = await anyio.to_thread.run_sync(self._hasher.hash, new_password)
            redeemed = await self._store.redeem_reset_code(record.id, email, password_hash, now)
        except StoreError:
            logger.exception("Reset code redemption for %s failed", email)
            return WorkflowResult(ResultKind.RESET_REDEEM_FAILED)

        if not redeemed:
            logger.warning("Reset code %s was consumed concurrently", record.id)
            return WorkflowResult(ResultKind.RESET_CODE_INVALID)

        logger.info("Password reset completed with code %s", record.id)
        return WorkflowResult(ResultKind.PASSWORD_RESET)


__all__ = [
    "AccountService",
    "PASSWORD_MIN_LENGTH",
    "RESET_CODE_ALPHABET",
    "RESET_CODE_LENGTH",
    "RESET_CODE_TTL",
    "generate_reset_code",
]
