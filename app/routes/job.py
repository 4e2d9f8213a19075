# ========================================
# app/routes/job.py - JOB BOARD AND APPLICATIONS
# ========================================

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from app.database import get_db
from app.schemas.application import ApplicationCreate, ApplicationStatusUpdate, ApplicantResponse
from app.schemas.job import JobCreate, JobResponse, JobStatusUpdate, JobLocation, JobType
from app.services.jobs import JobBoard
from app.utils.auth import get_current_user

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])


def get_job_board(db=Depends(get_db)) -> JobBoard:
    return JobBoard(db)


# ===========================
# LISTINGS
# ===========================

# ✅ 1. POST A JOB
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_job(
    job: JobCreate,
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    """Create a new job posting. Status starts as open."""
    return await jobs.create_job(current_user, job.model_dump())


# ✅ 2. OPEN JOBS FOR ME
@router.get("", response_model=List[JobResponse])
async def get_jobs(
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    """Open jobs with a future deadline that you did not post or apply to."""
    return await jobs.list_open_jobs(current_user)


# ✅ 3. SEARCH JOBS
@router.get("/search", response_model=List[JobResponse])
async def search_jobs(
    title: Optional[str] = Query(None, description="Substring of the title"),
    location: Optional[JobLocation] = Query(None),
    job_type: Optional[JobType] = Query(None),
    min_experience: Optional[int] = Query(None, ge=0, description="Jobs requiring at most this many years"),
    graduation_year: Optional[int] = Query(None, description="Jobs for this graduation year or later"),
    branch: Optional[str] = Query(None),
    degree: Optional[str] = Query(None),
    skills: Optional[str] = Query(None, description="Comma-separated skills, any may match"),
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    """Search open jobs."""
    filters = {
        "title": title,
        "location": location,
        "job_type": job_type,
        "min_experience": min_experience,
        "graduation_year": graduation_year,
        "branch": branch,
        "degree": degree,
        "skills": skills,
    }
    return await jobs.search_jobs(filters, current_user)


# ✅ 4. JOBS I POSTED
@router.get("/me")
async def get_my_jobs(
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    return await jobs.list_my_jobs(current_user)


# ✅ 5. JOBS I APPLIED TO
@router.get("/applied")
async def get_applied_jobs(
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    """Jobs you applied to, most recent application first."""
    return await jobs.jobs_applied_by_user(current_user)


# ✅ 6. JOBS OFFERED TO ME
@router.get("/offered")
async def get_offered_jobs(
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    """Jobs where your application was accepted."""
    return await jobs.jobs_offered_to_user(current_user)


# ✅ 7. JOBS POSTED BY A USER
@router.get("/user/{user_id}", response_model=List[JobResponse])
async def get_jobs_by_user(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    return await jobs.list_jobs_by_user(current_user, user_id)


# ✅ 8. SINGLE JOB
@router.get("/{job_id}")
async def get_job(
    job_id: str,
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    """Job details; only your own application is included."""
    return await jobs.get_job(current_user, job_id)


# ===========================
# APPLICATIONS
# ===========================

# ✅ 9. APPLY
@router.post("/{job_id}/apply", status_code=status.HTTP_201_CREATED)
async def apply_for_job(
    job_id: str,
    application: Optional[ApplicationCreate] = None,
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    resume_link = application.resume_link if application else None
    created = await jobs.apply_for_job(current_user, job_id, resume_link)
    return {"message": "Application submitted successfully", "application": created}


# ✅ 10. APPLICANTS (poster only)
@router.get("/{job_id}/applicants", response_model=List[ApplicantResponse])
async def get_applicants(
    job_id: str,
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    return await jobs.list_applicants(current_user, job_id)


# ✅ 11. UPDATE JOB STATUS (poster only)
@router.patch("/{job_id}/status")
async def update_job_status(
    job_id: str,
    status_update: JobStatusUpdate,
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    """Update job status (open/closed/filled)."""
    return await jobs.update_job_status(current_user, job_id, status_update.status)


# ✅ 12. UPDATE APPLICATION STATUS (poster only)
@router.patch("/{job_id}/application")
async def update_application_status(
    job_id: str,
    status_update: ApplicationStatusUpdate,
    current_user: dict = Depends(get_current_user),
    jobs: JobBoard = Depends(get_job_board)
):
    return await jobs.update_application_status(
        current_user, job_id, status_update.application_id, status_update.status
    )
