"""
Public subscription endpoints.

Endpoints:
- POST /api/subscribe - Start the double opt-in flow
- GET /subscriptions/confirm - Confirm via emailed link
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from letterbox.api.deps import get_context
from letterbox.app_shell.context import AppContext
from letterbox.components.subscriptions import (
    ConfirmInput,
    SubscribeInput,
    run_confirm,
    run_subscribe,
)

router = APIRouter()


# --- Request/Response Models ---


class SubscribeRequest(BaseModel):
    """Request body for a subscription."""

    name: str = Field(..., description="Subscriber display name")
    email: str = Field(..., description="Email address to subscribe")


class SubscribeResponse(BaseModel):
    success: bool
    message: str


class ConfirmResponse(BaseModel):
    success: bool
    message: str


class ErrorResponse(BaseModel):
    detail: str
    code: str


# --- Endpoints ---


@router.post(
    "/api/subscribe",
    response_model=SubscribeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid name or email"},
        500: {"model": ErrorResponse, "description": "Store or email failure"},
    },
    summary="Subscribe",
)
def subscribe(
    request_body: SubscribeRequest,
    ctx: AppContext = Depends(get_context),
) -> SubscribeResponse:
    """
    Subscribe to the newsletter.

    Duplicate requests succeed with the same message, so the response does
    not reveal whether the address was already known.
    """
    run_subscribe(
        SubscribeInput(name=request_body.name, email=request_body.email),
        ctx.store,
        ctx.email_client,
        ctx.subscription_config,
    )
    return SubscribeResponse(
        success=True,
        message="Please check your email to confirm your subscription",
    )


@router.get(
    "/subscriptions/confirm",
    response_model=ConfirmResponse,
    responses={401: {"model": ErrorResponse, "description": "Unknown token"}},
    summary="Confirm subscription",
)
def confirm(
    token: str = Query(..., description="Token from the confirmation email"),
    ctx: AppContext = Depends(get_context),
) -> ConfirmResponse:
    result = run_confirm(ConfirmInput(token=token), ctx.store)
    message = (
        "Your subscription was already confirmed"
        if result.already_confirmed
        else "Your subscription is confirmed"
    )
    return ConfirmResponse(success=True, message=message)
