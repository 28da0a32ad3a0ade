"""Users router -- the current user's profile and trust flags."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from jobguard.directory.models import Job, User
from web.backend.app.middleware.auth import get_current_user
from web.backend.app.models.api import JobResponse, UserResponse, error_responses

router = APIRouter(prefix="/users", tags=["users"], responses=error_responses(401))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def user_response(u: User) -> UserResponse:
    """Convert a domain User to a Pydantic UserResponse."""
    return UserResponse(
        id=u.id,
        name=u.name,
        email=u.email,
        phone=u.phone,
        role=u.role.value,
        email_verified=u.email_verified,
        phone_verified=u.phone_verified,
        is_approved=u.is_approved,
        created_at=u.created_at,
    )


def job_response(j: Job) -> JobResponse:
    """Convert a domain Job to a Pydantic JobResponse."""
    return JobResponse(
        id=j.id,
        employer_id=j.employer_id,
        title=j.title,
        company=j.company,
        location=j.location,
        description=j.description,
        status=j.status.value,
        created_at=j.created_at,
        updated_at=j.updated_at,
    )


@router.get("/me", response_model=UserResponse, summary="Current user")
async def me(user: User = Depends(get_current_user)):
    return user_response(user)
