from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError


class Argon2PasswordHasher:
    """Password hashing adapter backed by argon2-cffi."""

    def __init__(self) -> None:
        self.ph = PasswordHasher()
        # Verified against when the username is unknown, so both paths cost one hash.
        self._dummy_hash = self.ph.hash("letterbox-dummy-password")

    def hash_password(self, password: str) -> str:
        return str(self.ph.hash(password))

    def verify_password(self, password: str, hash_str: str | None) -> bool:
        try:
            self.ph.verify(hash_str or self._dummy_hash, password)
        except (VerificationError, InvalidHashError):
            return False
        return hash_str is not None
