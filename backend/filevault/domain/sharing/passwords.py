"""
Share Password Hashing

Argon2id hashing for share-link passwords.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError


class SharePasswordHasher:
    """
    Hashes and verifies share-link passwords with argon2id.

    Verification runs in constant time with respect to the password and
    never raises for a bad password or a corrupted hash.
    """

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 1):
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Cannot hash an empty password")
        return self._hasher.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        if not password_hash or password is None:
            return False
        try:
            return self._hasher.verify(password_hash, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False
