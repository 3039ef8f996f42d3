from typing import Protocol

from letterbox.core.entities import StoredCredential


class CredentialRepoPort(Protocol):
    def get_operator_credential(self, username: str) -> StoredCredential | None: ...


class PasswordVerifierPort(Protocol):
    def verify_password(self, password: str, hash_str: str | None) -> bool:
        """
        Check `password` against `hash_str`.

        Passing None must still cost a full verification and return False,
        so unknown usernames are indistinguishable by timing.
        """
        ...
