"""
Operator newsletter endpoint.

POST /api/newsletters - Broadcast an issue to confirmed subscribers.
Requires `Authorization: Basic ...`, checked before the body is validated.
Returns 200 when every send succeeded and 502 with the same report body
when any failed.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from letterbox.api.deps import get_context, get_operator
from letterbox.app_shell.context import AppContext
from letterbox.components.auth import AuthenticatedOperator
from letterbox.components.newsletter import DispatchReport, NewsletterIssue, run_publish

router = APIRouter()


class NewsletterContent(BaseModel):
    html: str = ""
    text: str = ""


class NewsletterRequest(BaseModel):
    title: str = Field(..., description="Subject line")
    content: NewsletterContent


class FailedDelivery(BaseModel):
    email: str
    error: str | None


class DispatchResponse(BaseModel):
    success: bool
    attempted: int
    delivered: int
    failed: list[FailedDelivery]


def _report_response(report: DispatchReport) -> DispatchResponse:
    return DispatchResponse(
        success=report.success,
        attempted=report.attempted,
        delivered=len(report.delivered),
        failed=[FailedDelivery(email=o.email, error=o.error) for o in report.failed],
    )


@router.post(
    "/api/newsletters",
    response_model=DispatchResponse,
    responses={
        401: {"description": "Missing or invalid credentials"},
        502: {"model": DispatchResponse, "description": "Some deliveries failed"},
    },
    summary="Publish newsletter",
)
def publish_newsletter(
    request_body: NewsletterRequest,
    operator: AuthenticatedOperator = Depends(get_operator),
    ctx: AppContext = Depends(get_context),
) -> DispatchResponse | JSONResponse:
    issue = NewsletterIssue(
        title=request_body.title,
        html=request_body.content.html,
        text=request_body.content.text,
    )
    report = run_publish(
        issue, operator, recipients=ctx.store, email_sender=ctx.email_client
    )

    body = _report_response(report)
    if not report.success:
        return JSONResponse(status_code=502, content=body.model_dump())
    return body
