"""Domain models for storefront accounts and password-reset codes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


class AccountStatus(str, Enum):
    """Approval state of a registered account."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def can_authenticate(self) -> bool:
        return self is AccountStatus.APPROVED


class InvalidStatusTransition(ValueError):
    """Raised when an approval decision would leave a terminal state."""


def check_transition(current: AccountStatus, target: AccountStatus) -> None:
    """Validate an administrative status change.

    Only pending registrations may be decided. Approved and rejected accounts
    are terminal; re-applying the same decision is accepted as a no-op.
    """

    if current is target:
        return
    if current is not AccountStatus.PENDING:
        raise InvalidStatusTransition(
            f"Account is already {current.value} and cannot become {target.value}"
        )
    if target is AccountStatus.PENDING:
        raise InvalidStatusTransition("Accounts cannot be returned to pending")


@dataclass(frozen=True)
class Account:
    """A registered storefront customer as stored in the accounts table."""

    id: int
    name: str
    email: str
    company_name: str
    address: str
    phone_number: str
    password_hash: str
    status: AccountStatus
    created_at: datetime

    def public_view(self) -> Dict[str, object]:
        """Return the session payload for this account, without the password hash."""

        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "company_name": self.company_name,
            "address": self.address,
            "phone_number": self.phone_number,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class ResetCode:
    id: int
    email: str
    code: str
    expires_at: datetime
    created_at: datetime
    used_at: Optional[datetime] = None

    def is_usable(self, now: datetime) -> bool:
        return self.used_at is None and now < self.expires_at


@dataclass(frozen=True)
class RegistrationForm:
    """Raw registration input as submitted by the customer."""

    name: str
    email: str
    password: str
    confirm_password: str
    company_name: str
    address: str
    phone_number: str


__all__ = [
    "Account",
    "AccountStatus",
    "InvalidStatusTransition",
    "RegistrationForm",
    "ResetCode",
    "check_transition",
]
