"""Admin router -- moderation decisions and employer approval."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from jobguard.auth.permissions import require_role
from jobguard.directory.models import Role, User
from jobguard.services import Services
from web.backend.app.middleware.auth import get_current_user, get_services
from web.backend.app.models.api import (
    DecisionRequest,
    EmployerApprovalRequest,
    EmployerApprovalResponse,
    FlagReportResponse,
    JobResponse,
    UserResponse,
    error_responses,
)
from web.backend.app.routers.users import job_response, user_response

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses=error_responses(400, 401, 403, 404, 409),
)


async def get_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency that requires the admin role."""
    require_role(user, Role.admin)
    return user


# ---------------------------------------------------------------------------
# Flagged jobs
# ---------------------------------------------------------------------------


@router.get(
    "/jobs/flagged",
    response_model=list[JobResponse],
    summary="List jobs awaiting a moderation decision",
)
async def list_flagged_jobs(
    admin: User = Depends(get_admin),
    services: Services = Depends(get_services),
):
    jobs = sorted(services.gate.flagged_jobs(), key=lambda j: j.updated_at, reverse=True)
    return [job_response(j) for j in jobs]


@router.get(
    "/jobs/{job_id}/reports",
    response_model=list[FlagReportResponse],
    summary="Flag reports recorded against a job",
)
async def list_reports(
    job_id: str,
    admin: User = Depends(get_admin),
    services: Services = Depends(get_services),
):
    services.jobs.require_job(job_id)
    return [
        FlagReportResponse(
            id=r.id,
            job_id=r.job_id,
            reporter_id=r.reporter_id,
            reason=r.reason,
            created_at=r.created_at,
        )
        for r in services.tracker.reports_for(job_id)
    ]


@router.patch(
    "/jobs/{job_id}/decision",
    response_model=JobResponse,
    summary="Approve or remove a flagged job",
)
async def decide(
    job_id: str,
    body: DecisionRequest,
    admin: User = Depends(get_admin),
    services: Services = Depends(get_services),
):
    """``approve`` restores the job and clears its reports; ``remove`` closes it."""
    job = services.decisions.decide(job_id, body.decision, admin_id=admin.id)
    return job_response(job)


@router.patch(
    "/jobs/{job_id}/reopen",
    response_model=JobResponse,
    summary="Reopen a closed job",
)
async def reopen(
    job_id: str,
    admin: User = Depends(get_admin),
    services: Services = Depends(get_services),
):
    return job_response(services.gate.reopen(job_id))


# ---------------------------------------------------------------------------
# Employers
# ---------------------------------------------------------------------------


@router.get(
    "/employers/pending",
    response_model=list[UserResponse],
    summary="Employers awaiting approval",
)
async def pending_employers(
    admin: User = Depends(get_admin),
    services: Services = Depends(get_services),
):
    return [user_response(u) for u in services.users.list_pending_employers()]


@router.patch(
    "/employers/{employer_id}/approve",
    response_model=EmployerApprovalResponse,
    summary="Approve (or revoke) an employer",
)
async def approve_employer(
    employer_id: str,
    body: EmployerApprovalRequest,
    admin: User = Depends(get_admin),
    services: Services = Depends(get_services),
):
    """Set the employer's approval; approving activates their pending jobs."""
    activated = services.gate.approve_employer(employer_id, body.approved)
    return EmployerApprovalResponse(
        employer=user_response(services.users.require_user(employer_id)),
        activated_jobs=[j.id for j in activated],
    )
