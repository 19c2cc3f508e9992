"""Password hashing capability used by account lifecycle operations."""

from typing import Protocol

from argon2 import PasswordHasher as _Argon2Hasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError


class PasswordHasher(Protocol):
    """Opaque hash/verify pair."""

    def hash(self, plaintext: str) -> str:
        ...

    def matches(self, plaintext: str, digest: str) -> bool:
        ...


class Argon2PasswordHasher:
    """Argon2id hasher backed by argon2-cffi."""

    def __init__(self, hasher: _Argon2Hasher | None = None) -> None:
        self._hasher = hasher or _Argon2Hasher()

    def hash(self, plaintext: str) -> str:
        return self._hasher.hash(plaintext)

    def matches(self, plaintext: str, digest: str) -> bool:
        """Return True when ``plaintext`` produces ``digest``.

        A mismatch and a malformed digest both count as a failed match.
        """
        try:
            return self._hasher.verify(digest, plaintext)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            return False
