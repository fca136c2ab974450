"""Password hashing for storefront accounts."""
from __future__ import annotations

from typing import Optional

from passlib.context import CryptContext
from passlib.utils import MAX_PASSWORD_SIZE

DEFAULT_ROUNDS = 600_000
PASSWORD_MAX_BYTES = MAX_PASSWORD_SIZE
_SCHEME = "pbkdf2_sha256"


class PasswordHasher:
    """Salted PBKDF2-SHA256 hashing backed by passlib.

    Digests use the modular crypt format (``$pbkdf2-sha256$rounds$salt$hash``),
    so the salt and round count travel with the stored value and older digests
    keep verifying after the configured rounds change.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        if rounds < 1:
            raise ValueError("PBKDF2 rounds must be positive")
        self._rounds = rounds
        self._context = CryptContext(
            schemes=[_SCHEME],
            deprecated="auto",
            pbkdf2_sha256__rounds=rounds,
        )

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password must not be empty")
        return self._context.hash(password)

    def verify(self, password: str, digest: Optional[str]) -> bool:
        if not password or not digest:
            return False
        try:
            return self._context.verify(password, digest)
        except (ValueError, TypeError):
            # Unrecognised or corrupt digests fail closed.
            return False


__all__ = ["DEFAULT_ROUNDS", "PASSWORD_MAX_BYTES", "PasswordHasher"]
