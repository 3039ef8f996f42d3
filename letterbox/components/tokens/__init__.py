"""
Tokens component.

Confirmation token generation and resolution.
"""

from letterbox.components.tokens.component import (
    CONFIRMATION_PATH,
    DEFAULT_TOKEN_BYTES,
    MIN_TOKEN_BYTES,
    build_confirmation_url,
    generate_token,
    issue_token,
    resolve_token,
)
from letterbox.components.tokens.models import (
    ConfirmationToken,
    TokenConfigError,
    TokenError,
    TokenNotFoundError,
)
from letterbox.components.tokens.ports import TokenLookupPort

__all__ = [
    # Pure functions
    "generate_token",
    "issue_token",
    "resolve_token",
    "build_confirmation_url",
    # Constants
    "CONFIRMATION_PATH",
    "DEFAULT_TOKEN_BYTES",
    "MIN_TOKEN_BYTES",
    # Models
    "ConfirmationToken",
    # Errors
    "TokenError",
    "TokenNotFoundError",
    "TokenConfigError",
    # Ports
    "TokenLookupPort",
]
