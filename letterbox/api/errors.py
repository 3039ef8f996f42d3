"""
Exception handlers.

Maps each error family raised by the components to a transport response:
- client input (validation, newsletter content) → 400
- auth rejections and unknown tokens → 401
- store failures and confirmation email failures → 500

Request bodies that fail schema parsing never reach the components;
FastAPI rejects them with 422.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from letterbox.components.auth.models import AuthError, AuthStoreError
from letterbox.components.newsletter.models import InvalidNewsletterError
from letterbox.components.subscribers.models import SubscriberValidationError
from letterbox.components.subscriptions.models import ConfirmationEmailError
from letterbox.components.tokens.models import TokenError
from letterbox.core.ports.db import StoreError

logger = logging.getLogger(__name__)

DEFAULT_REALM = "publish"


def _error(status_code: int, detail: str, code: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code, **extra})


def _realm(request: Request) -> str:
    context = getattr(request.app.state, "context", None)
    return context.config.auth.realm if context is not None else DEFAULT_REALM


async def handle_validation_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, SubscriberValidationError)
    return _error(
        status.HTTP_400_BAD_REQUEST,
        str(exc),
        exc.code,
        field=exc.field,
        errors=[{"code": e.code, "message": e.message, "field": e.field} for e in exc.errors],
    )


async def handle_invalid_newsletter(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, InvalidNewsletterError)
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), "INVALID_NEWSLETTER", field=exc.field)


async def handle_token_error(request: Request, exc: Exception) -> JSONResponse:
    return _error(
        status.HTTP_401_UNAUTHORIZED, "Invalid or unknown confirmation link", "INVALID_TOKEN"
    )


async def handle_auth_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, AuthError)
    response = _error(status.HTTP_401_UNAUTHORIZED, str(exc), exc.code)
    response.headers["WWW-Authenticate"] = f'Basic realm="{_realm(request)}"'
    return response


async def handle_server_error(request: Request, exc: Exception) -> JSONResponse:
    # Detail stays generic; the cause goes to the log only
    logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    code = "EMAIL_ERROR" if isinstance(exc, ConfirmationEmailError) else "STORE_ERROR"
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SubscriberValidationError, handle_validation_error)
    app.add_exception_handler(InvalidNewsletterError, handle_invalid_newsletter)
    app.add_exception_handler(TokenError, handle_token_error)
    app.add_exception_handler(AuthStoreError, handle_server_error)
    app.add_exception_handler(AuthError, handle_auth_error)
    app.add_exception_handler(ConfirmationEmailError, handle_server_error)
    app.add_exception_handler(StoreError, handle_server_error)
