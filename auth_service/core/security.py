"""
core/security.py
----------------
Password hashing.

Design decisions:
  - bcrypt with a work factor of 10 by default (BCRYPT_ROUNDS); the digest
    carries algorithm and cost ("$2b$10$..."), so raising the cost later
    still verifies older hashes.
  - bcrypt only reads the first 72 bytes of a secret. Longer passwords are
    rejected rather than truncated, so two passwords sharing a 72-byte
    prefix never verify against each other.
  - One PasswordHasher per application, built by create_application() and
    kept on app.state; services receive it through their constructor.
  - Hashing is CPU-bound: async callers run it with run_in_threadpool.
  - Token signing and verification live in services/token_service.py.
"""

from passlib.context import CryptContext

from auth_service.core.errors import InternalError, ValidationError
from auth_service.core.logging import get_logger

logger = get_logger(__name__)

BCRYPT_MAX_BYTES = 72


def password_too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > BCRYPT_MAX_BYTES


class PasswordHasher:
    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__truncate_error=True,
        )

    def hash(self, plain: str) -> str:
        """Return a salted bcrypt hash of the plain-text password."""
        if password_too_long(plain):
            raise ValidationError(
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes long"
            )
        try:
            return self._context.hash(plain)
        except (ValueError, TypeError) as exc:
            logger.error("Password hashing failed", error=str(exc))
            raise InternalError("Failed to hash password") from exc

    def verify(self, plain: str, hashed: str) -> bool:
        """Constant-time comparison of plain password against stored hash."""
        if not hashed or password_too_long(plain):
            return False
        try:
            return self._context.verify(plain, hashed)
        except (ValueError, TypeError):
            # Unrecognised or corrupted digest
            return False
