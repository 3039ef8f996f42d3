"""
Auth component - operator authentication gate.

Parses Basic credentials and checks them against the stored operator login.
"""

from .component import (
    BASIC_SCHEME,
    parse_basic_auth,
    run,
    run_authenticate,
    verify_credentials,
)
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

__all__ = [
    "BASIC_SCHEME",
    "parse_basic_auth",
    "verify_credentials",
    "run_authenticate",
    "run",
    "AuthenticateInput",
    "AuthenticatedOperator",
    "BasicCredentials",
    "AuthError",
    "AuthStoreError",
    "Base64DecodeError",
    "InvalidLoginParamsError",
    "InvalidUtfError",
    "MissingAuthHeaderError",
    "MissingColonError",
    "WrongAuthSchemaError",
    "CredentialRepoPort",
    "PasswordVerifierPort",
]
