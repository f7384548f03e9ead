"""bcrypt password hashing, run off the event loop."""

import asyncio

import bcrypt

from core.config import settings
from core.exceptions import ValidationError

# bcrypt input limit; longer passwords are rejected, never truncated
BCRYPT_MAX_BYTES = 72


class BcryptPasswordHasher:
    """Hashes and verifies passwords with bcrypt in a worker thread."""

    def __init__(self, rounds: int = settings.bcrypt_rounds) -> None:
        self._rounds = rounds

    async def hash(self, password: str) -> str:
        """Hash a password.

        Raises:
            ValidationError: The password is longer than bcrypt accepts.
        """
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes",
                details={"max_bytes": BCRYPT_MAX_BYTES},
            )
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            # Could never have been stored
            return False
        return await asyncio.to_thread(self._verify_sync, password, password_hash)

    def _hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def _verify_sync(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")
