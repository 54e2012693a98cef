"""
Redirect engine routes.

GET  /{short_code}            — follow a short link (302)
GET  /{short_code}/password   — password challenge for a protected link
POST /api/verify-password     — submit a password, get the target back

The catch-all router must be included after every other router so that
/api/* and /health are matched first.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import RedirectResponse

from dependencies import get_redirect_service, get_visit_recorder
from errors import ValidationError
from schemas.dto.requests.url import VerifyPasswordRequest
from schemas.dto.responses.common import ErrorResponse
from schemas.dto.responses.url import (
    PasswordChallengeResponse,
    VerifyPasswordResponse,
)
from services.access_evaluator import AccessDecision, denial_error
from services.redirect_service import RedirectService
from services.visit_recorder import VisitMetadata, VisitRecorder
from shared.logging import get_logger

log = get_logger(__name__)

_DENIALS = {
    404: {"model": ErrorResponse},
    410: {"model": ErrorResponse},
}

router = APIRouter(tags=["redirect"], responses=_DENIALS)
verify_router = APIRouter(
    prefix="/api",
    tags=["redirect"],
    responses={
        **_DENIALS,
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
    },
)


@router.get("/{short_code}")
async def follow_link(
    short_code: str,
    request: Request,
    background_tasks: BackgroundTasks,
    service: RedirectService = Depends(get_redirect_service),
    recorder: VisitRecorder = Depends(get_visit_recorder),
) -> RedirectResponse:
    record, outcome = await service.resolve(short_code)

    if outcome.decision is AccessDecision.PASSWORD_REQUIRED:
        return RedirectResponse(url=f"/{short_code}/password", status_code=302)
    if not outcome.allowed:
        raise denial_error(outcome)

    background_tasks.add_task(
        recorder.record_best_effort, record.id, VisitMetadata.from_request(request)
    )
    return RedirectResponse(url=outcome.target, status_code=302)


@router.get("/{short_code}/password", response_model=PasswordChallengeResponse)
async def password_challenge(
    short_code: str,
    service: RedirectService = Depends(get_redirect_service),
) -> PasswordChallengeResponse:
    _, outcome = await service.resolve(short_code)

    if outcome.decision is AccessDecision.PASSWORD_REQUIRED:
        return PasswordChallengeResponse(short_code=short_code, password_required=True)
    if not outcome.allowed:
        raise denial_error(outcome)
    return PasswordChallengeResponse(short_code=short_code, password_required=False)


@verify_router.post("/verify-password", response_model=VerifyPasswordResponse)
async def verify_password(
    body: VerifyPasswordRequest,
    request: Request,
    service: RedirectService = Depends(get_redirect_service),
    recorder: VisitRecorder = Depends(get_visit_recorder),
) -> VerifyPasswordResponse:
    if not body.short_code or not body.password:
        raise ValidationError("Short code and password are required")

    record, outcome = await service.resolve(body.short_code, body.password)
    if not outcome.allowed:
        if outcome.decision is AccessDecision.PASSWORD_INCORRECT:
            log.info("password_rejected", short_code=body.short_code)
        raise denial_error(outcome)

    await recorder.record_best_effort(record.id, VisitMetadata.from_request(request))
    return VerifyPasswordResponse(original_url=outcome.target)
