from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from letterbox.core.ports.db import StoreError


@dataclass(frozen=True)
class BasicCredentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class AuthenticateInput:
    authorization: bytes | str | None


@dataclass(frozen=True)
class AuthenticatedOperator:
    """Proof of a successful credential check, handed to protected operations."""

    user_id: UUID
    username: str


# --- Error Types ---


class AuthError(Exception):
    """Base class for every auth gate failure."""

    code = "AUTH_ERROR"


class InvalidLoginParamsError(AuthError):
    code = "INVALID_LOGIN"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"the user doesn't have authorization: {message}")


class MissingAuthHeaderError(AuthError):
    code = "MISSING_AUTH_HEADER"

    def __init__(self) -> None:
        super().__init__("header 'Authorization' is missing from the request")


class InvalidUtfError(AuthError):
    code = "INVALID_UTF8"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"got invalid utf-8 in 'Authorization' header: {detail}")


class MissingColonError(AuthError):
    code = "MISSING_COLON"

    def __init__(self) -> None:
        super().__init__(
            "missing colon in 'Authorization' header - can't split username and password"
        )


class WrongAuthSchemaError(AuthError):
    code = "WRONG_AUTH_SCHEMA"

    def __init__(self, expected: str) -> None:
        self.expected = expected
        super().__init__(f"received the wrong authentication schema. expected: {expected}")


class Base64DecodeError(AuthError):
    code = "BASE64_DECODE"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"base64 decoding error: {detail}")


class AuthStoreError(AuthError):
    """Credential lookup failed in the store (server fault, not a rejection)."""

    code = "STORE_ERROR"

    def __init__(self, cause: StoreError) -> None:
        self.cause = cause
        super().__init__(f"store error: {cause}")
