from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from typing import Optional

from api.auth import verify_api_key
from api.models.common_schemas import ErrorResponse
from api.models.job_schemas import JobCreateRequest, JobListResponse, JobResponse, JobUpdateRequest
from models.job import Job
from repositories.job_application_repository import JobApplicationRepository
from repositories.job_repository import JobRepository
from utils.database import get_db

router = APIRouter(
    prefix="/jobs",
    tags=["Jobs"],
    dependencies=[Depends(verify_api_key)]
)


def get_job_repo(db: Session = Depends(get_db)) -> JobRepository:
    return JobRepository(db)


def _get_or_404(repo: JobRepository, job_id: str) -> Job:
    job = repo.get_by_id(job_id)
    if not job:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")
    return job


# ============ JOB ENDPOINTS ============

@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED,
             responses={409: {"model": ErrorResponse}})
def create_job(request: JobCreateRequest, repo: JobRepository = Depends(get_job_repo)):
    try:
        return repo.create(Job(**request.model_dump()))
    except IntegrityError:
        repo.db.rollback()
        raise HTTPException(status_code=409, detail=f"Job code already exists: {request.job_code}")


@router.get("", response_model=JobListResponse)
def list_jobs(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None, description="Substring of title or description"),
    repo: JobRepository = Depends(get_job_repo),
):
    jobs, total = repo.get_paginated(limit=limit, offset=offset, search=search)
    return JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in jobs],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{job_id}", response_model=JobResponse, responses={404: {"model": ErrorResponse}})
def get_job(job_id: str, repo: JobRepository = Depends(get_job_repo)):
    return _get_or_404(repo, job_id)


@router.put("/{job_id}", response_model=JobResponse,
            responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
def update_job(job_id: str, request: JobUpdateRequest, repo: JobRepository = Depends(get_job_repo)):
    job = _get_or_404(repo, job_id)
    try:
        return repo.update_fields(job, request.model_dump(exclude_unset=True))
    except IntegrityError:
        repo.db.rollback()
        raise HTTPException(status_code=409, detail=f"Job code already exists: {request.job_code}")


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT, responses={404: {"model": ErrorResponse}})
def delete_job(job_id: str, repo: JobRepository = Depends(get_job_repo)):
    job = _get_or_404(repo, job_id)
    JobApplicationRepository(repo.db).delete_by_job(job.id)
    repo.delete(job)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
