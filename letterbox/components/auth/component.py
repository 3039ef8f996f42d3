"""
Auth gate component.

Stateless check of an `Authorization: Basic <base64(username:password)>`
header against the stored operator credential. Every failure is a typed
AuthError; nothing is cached between requests.
"""

from __future__ import annotations

import base64
import binascii
import logging

from letterbox.core.ports.db import StoreError

from .models import (
    AuthenticatedOperator,
    AuthenticateInput,
    AuthError,
    AuthStoreError,
    Base64DecodeError,
    BasicCredentials,
    InvalidLoginParamsError,
    InvalidUtfError,
    MissingAuthHeaderError,
    MissingColonError,
    WrongAuthSchemaError,
)
from .ports import CredentialRepoPort, PasswordVerifierPort

logger = logging.getLogger(__name__)

BASIC_SCHEME = "Basic"


def _decode_utf8(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidUtfError(str(e)) from e


def parse_basic_auth(
    header: bytes | str | None, scheme: str = BASIC_SCHEME
) -> BasicCredentials:
    """
    Parse an Authorization header value into credentials.

    Raises:
        MissingAuthHeaderError: header absent
        InvalidUtfError: header or decoded payload is not UTF-8
        WrongAuthSchemaError: not `<scheme> <credentials>`
        Base64DecodeError: payload is not valid base64
        MissingColonError: decoded payload has no `:`
    """
    if header is None:
        raise MissingAuthHeaderError()

    value = _decode_utf8(header) if isinstance(header, bytes) else header

    parts = value.strip().split(" ", 1)
    if len(parts) != 2 or parts[0] != scheme:
        raise WrongAuthSchemaError(scheme)

    try:
        decoded = base64.b64decode(parts[1].strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise Base64DecodeError(str(e)) from e

    username, colon, password = _decode_utf8(decoded).partition(":")
    if not colon:
        raise MissingColonError()

    return BasicCredentials(username=username, password=password)


def verify_credentials(
    credentials: BasicCredentials,
    repo: CredentialRepoPort,
    verifier: PasswordVerifierPort,
) -> AuthenticatedOperator:
    """
    Compare credentials against the stored operator credential.

    The password check always runs, even for unknown usernames, so the
    response time does not reveal which half was wrong.
    """
    try:
        stored = repo.get_operator_credential(credentials.username)
    except StoreError as e:
        raise AuthStoreError(e) from e

    password_hash = stored.password_hash if stored else None
    password_ok = verifier.verify_password(credentials.password, password_hash)

    if stored is None or not password_ok:
        raise InvalidLoginParamsError("invalid username or password")

    return AuthenticatedOperator(user_id=stored.user_id, username=stored.username)


def run_authenticate(
    inp: AuthenticateInput,
    repo: CredentialRepoPort,
    verifier: PasswordVerifierPort,
    *,
    scheme: str = BASIC_SCHEME,
) -> AuthenticatedOperator:
    username: str | None = None
    try:
        credentials = parse_basic_auth(inp.authorization, scheme)
        username = credentials.username
        operator = verify_credentials(credentials, repo, verifier)
    except AuthStoreError:
        logger.exception("Credential lookup failed")
        raise
    except AuthError as e:
        logger.warning("Authentication rejected: %s (username=%r)", e.code, username)
        raise

    logger.info("Authenticated operator %s", operator.username)
    return operator


def run(
    inp: AuthenticateInput,
    *,
    repo: CredentialRepoPort | None = None,
    verifier: PasswordVerifierPort | None = None,
    scheme: str = BASIC_SCHEME,
) -> AuthenticatedOperator:
    if isinstance(inp, AuthenticateInput):
        assert repo and verifier
        return run_authenticate(inp, repo, verifier, scheme=scheme)

    raise ValueError(f"Unknown input type: {type(inp)}")
