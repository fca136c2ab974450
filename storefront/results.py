"""Typed outcomes returned by the account workflows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .models import Account


class ResultKind(str, Enum):
    """Every outcome an account workflow can report to its caller."""

    # successes
    REGISTRATION_SUBMITTED = "registration_submitted"
    AUTHENTICATED = "authenticated"
    RESET_CODE_ISSUED = "reset_code_issued"
    PASSWORD_RESET = "password_reset"

    # validation
    MISSING_FIELD = "missing_field"
    PASSWORD_MISMATCH = "password_mismatch"
    PASSWORD_TOO_SHORT = "password_too_short"
    PASSWORD_TOO_LONG = "password_too_long"
    EMAIL_TAKEN = "email_taken"

    # approval state
    REGISTRATION_PENDING = "registration_pending"
    REGISTRATION_REJECTED = "registration_rejected"

    # authentication / lookup
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_NOT_FOUND = "account_not_found"
    RESET_CODE_INVALID = "reset_code_invalid"

    # store failures
    REGISTRATION_FAILED = "registration_failed"
    LOGIN_FAILED = "login_failed"
    RESET_REQUEST_FAILED = "reset_request_failed"
    RESET_REDEEM_FAILED = "reset_redeem_failed"

    @property
    def ok(self) -> bool:
        return self in _SUCCESS_KINDS


_SUCCESS_KINDS = frozenset(
    {
        ResultKind.REGISTRATION_SUBMITTED,
        ResultKind.AUTHENTICATED,
        ResultKind.RESET_CODE_ISSUED,
        ResultKind.PASSWORD_RESET,
    }
)


@dataclass(frozen=True)
class WorkflowResult:
    """Outcome of a workflow call.

    ``account`` is set for registration and login successes, ``reset_code``
    and ``expires_at`` for issued reset codes, and ``field`` names the first
    empty input on ``MISSING_FIELD``.
    """

    kind: ResultKind
    account: Optional[Account] = None
    reset_code: Optional[str] = None
    expires_at: Optional[datetime] = None
    field: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind.ok


__all__ = ["ResultKind", "WorkflowResult"]
