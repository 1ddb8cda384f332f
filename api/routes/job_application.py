from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse
from sqlmodel import Session
from typing import Optional

from api.auth import verify_api_key
from api.models.common_schemas import ErrorResponse
from api.models.job_application_schemas import (
    DuplicateApplicationResponse,
    JobApplicationCreateRequest,
    JobApplicationListResponse,
    JobApplicationResponse,
    JobApplicationUpdateRequest,
)
from services.job_application_service import JobApplicationService
from utils.database import get_db
from utils.errors import DuplicateApplicationError, NotFoundError

router = APIRouter(
    prefix="/job-applications",
    tags=["Job Applications"],
    dependencies=[Depends(verify_api_key)]
)


def get_application_service(db: Session = Depends(get_db)) -> JobApplicationService:
    return JobApplicationService(db)


@router.post("", response_model=JobApplicationResponse, status_code=status.HTTP_201_CREATED,
             responses={404: {"model": ErrorResponse}, 409: {"model": DuplicateApplicationResponse}})
def create_job_application(
    request: JobApplicationCreateRequest,
    service: JobApplicationService = Depends(get_application_service),
):
    """
    Link a candidate to a job.

    Returns 409 with the existing application when the candidate already
    applied to this job, so the client can show "already applied".
    """
    try:
        application = service.create_application(
            candidate_id=request.candidate_id,
            job_id=request.job_id,
            status=request.status,
            notes=request.notes,
        )
        return JobApplicationResponse.model_validate(application)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateApplicationError as e:
        body = DuplicateApplicationResponse(
            detail=str(e),
            existing_application=JobApplicationResponse.model_validate(e.existing),
        )
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump(mode="json"))


@router.get("", response_model=JobApplicationListResponse)
def list_job_applications(
    job_id: Optional[str] = Query(None),
    candidate_id: Optional[str] = Query(None),
    service: JobApplicationService = Depends(get_application_service),
):
    applications = service.list_applications(job_id=job_id, candidate_id=candidate_id)
    return JobApplicationListResponse(
        applications=[JobApplicationResponse.model_validate(a) for a in applications]
    )


@router.put("/{application_id}", response_model=JobApplicationResponse, responses={404: {"model": ErrorResponse}})
def update_job_application(
    application_id: str,
    request: JobApplicationUpdateRequest,
    service: JobApplicationService = Depends(get_application_service),
):
    try:
        application = service.update_application(application_id, request.model_dump(exclude_unset=True))
        return JobApplicationResponse.model_validate(application)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT, responses={404: {"model": ErrorResponse}})
def delete_job_application(
    application_id: str,
    service: JobApplicationService = Depends(get_application_service),
):
    try:
        service.delete_application(application_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
