from fastapi import Depends, Request

from letterbox.app_shell.context import AppContext
from letterbox.components.auth import AuthenticatedOperator, AuthenticateInput, run_authenticate


def get_context(request: Request) -> AppContext:
    context: AppContext | None = request.app.state.context
    if context is None:
        raise RuntimeError("Application context is not initialised")
    return context


def get_raw_authorization(request: Request) -> bytes | None:
    """
    Authorization header exactly as received.

    Read from the ASGI scope so non-UTF-8 bytes reach the auth gate intact.
    """
    for name, value in request.scope.get("headers", []):
        if name.lower() == b"authorization":
            return bytes(value)
    return None


def get_operator(
    authorization: bytes | None = Depends(get_raw_authorization),
    ctx: AppContext = Depends(get_context),
) -> AuthenticatedOperator:
    """
    Run the auth gate for operator endpoints.

    FastAPI resolves dependencies before it validates the request body, so
    bad credentials are rejected with 401 even when the body is also
    invalid. A body that is not JSON at all is still rejected with 422 first.
    """
    return run_authenticate(
        AuthenticateInput(authorization),
        ctx.store,
        ctx.password_hasher,
        scheme=ctx.config.auth.scheme,
    )
