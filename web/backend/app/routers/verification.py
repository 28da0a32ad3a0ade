"""Verification router -- send and confirm one-time passcodes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from jobguard.directory.models import User
from jobguard.services import Services
from jobguard.verification.models import Channel
from web.backend.app.middleware.auth import get_current_user, get_services
from web.backend.app.models.api import (
    CodeSentResponse,
    ConfirmCodeRequest,
    UserResponse,
    VerificationStatusResponse,
    error_responses,
)
from web.backend.app.routers.users import user_response

router = APIRouter(
    prefix="/verify",
    tags=["verification"],
    responses=error_responses(400, 401, 404, 500),
)


def _channel(value: str) -> Channel:
    try:
        return Channel(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification type",
        ) from None


@router.post(
    "/{channel}/send",
    response_model=CodeSentResponse,
    summary="Send a verification code to the user's email or phone",
)
async def send_code(
    channel: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Issue a new code, superseding any outstanding one, and deliver it.

    Answers 500 when delivery fails; the issued code stays valid.
    """
    ch = _channel(channel)
    result = await services.verification.request_code(user.id, ch)
    label = "Email" if ch == Channel.email else "Phone"
    body = CodeSentResponse(
        success=result.delivered,
        message=(
            f"{label} verification code sent successfully"
            if result.delivered
            else f"Failed to send {ch.value} verification code"
        ),
        channel=ch.value,
        expires_at=result.expires_at.isoformat(),
        delivered=result.delivered,
    )
    if not result.delivered:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(),
        )
    return body


@router.post(
    "/{channel}/confirm",
    response_model=UserResponse,
    summary="Confirm a verification code",
)
async def confirm_code(
    channel: str,
    body: ConfirmCodeRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Consume the code and set the channel's trust flag."""
    updated = services.verification.verify_code(user.id, _channel(channel), body.code)
    return user_response(updated)


@router.get(
    "/status",
    response_model=VerificationStatusResponse,
    summary="Trust flags and outstanding codes for the current user",
)
async def verification_status(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    st = services.verification.status(user.id)
    return VerificationStatusResponse(
        subject_id=st.subject_id,
        email_verified=st.email_verified,
        phone_verified=st.phone_verified,
        pending=[c.value for c in st.pending],
    )
