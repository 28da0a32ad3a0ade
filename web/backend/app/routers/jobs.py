"""Jobs router -- job creation and community flagging."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from jobguard.auth.permissions import require_role
from jobguard.directory.models import Role, User
from jobguard.services import Services
from web.backend.app.middleware.auth import get_current_user, get_services
from web.backend.app.models.api import (
    FlagJobRequest,
    FlagJobResponse,
    JobCreateRequest,
    JobResponse,
    error_responses,
)
from web.backend.app.routers.users import job_response

router = APIRouter(
    prefix="/jobs",
    tags=["jobs"],
    responses=error_responses(400, 401, 403, 404),
)


@router.post(
    "",
    response_model=JobResponse,
    summary="Post a new job",
    status_code=status.HTTP_201_CREATED,
)
async def create_job(
    body: JobCreateRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Create a job for the calling employer.

    The job is ``active`` immediately if the employer is approved, otherwise
    ``pending`` until an admin approves the employer.
    """
    require_role(user, Role.employer)
    job = services.gate.create_job(
        user.id,
        body.title,
        company=body.company,
        location=body.location,
        description=body.description,
    )
    return job_response(job)


@router.get("/{job_id}", response_model=JobResponse, summary="Get a job")
async def get_job(
    job_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return job_response(services.jobs.require_job(job_id))


@router.post(
    "/{job_id}/flag",
    response_model=FlagJobResponse,
    summary="Flag a job as suspicious",
)
async def flag_job(
    job_id: str,
    body: FlagJobRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Record a flag report.  The job moves to ``flagged`` at the threshold."""
    outcome = services.tracker.report_job(job_id, user.id, body.reason or "")
    return FlagJobResponse(
        job_id=outcome.job_id,
        report_count=outcome.report_count,
        status=outcome.status.value,
        flagged_now=outcome.flagged_now,
    )


@router.patch(
    "/{job_id}/reopen",
    response_model=JobResponse,
    summary="Reopen one of your closed jobs",
)
async def reopen_job(
    job_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """The job's own employer, or an admin, may move it ``closed -> active``."""
    job = services.jobs.require_job(job_id)
    if user.role != Role.admin and job.employer_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the job's employer or an admin can reopen it",
        )
    return job_response(services.gate.reopen(job_id))
