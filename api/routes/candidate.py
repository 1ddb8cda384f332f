from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
from typing import Optional

from api.auth import verify_api_key
from api.models.candidate_schemas import (
    CandidateCreateRequest,
    CandidateEventListResponse,
    CandidateEventResponse,
    CandidateListResponse,
    CandidateResponse,
    CandidateUpdateRequest,
)
from api.models.common_schemas import ErrorResponse
from services.candidate_service import CandidateService
from utils.database import get_db
from utils.errors import CandidateNumberExhaustedError, NotFoundError

router = APIRouter(
    prefix="/candidates",
    tags=["Candidates"],
    dependencies=[Depends(verify_api_key)]
)


def get_candidate_service(db: Session = Depends(get_db)) -> CandidateService:
    return CandidateService(db)


@router.post("", response_model=CandidateResponse, status_code=status.HTTP_201_CREATED,
             responses={200: {"model": CandidateResponse}, 500: {"model": ErrorResponse}})
def create_candidate(
    request: CandidateCreateRequest,
    response: Response,
    service: CandidateService = Depends(get_candidate_service),
):
    """
    Create a candidate.

    If the mobile, email or national ID matches an existing candidate, no new
    profile is created: the existing one gets its empty fields filled and is
    returned with 200 OK. A new candidate is returned with 201 Created.
    """
    try:
        candidate, created = service.create_candidate(request.model_dump(exclude_unset=True))
        response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return CandidateResponse.from_candidate(candidate)
    except CandidateNumberExhaustedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create candidate: {str(e)}")


@router.get("", response_model=CandidateListResponse)
def list_candidates(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None, description="Substring of name, email or profession"),
    service: CandidateService = Depends(get_candidate_service),
):
    candidates, total = service.list_candidates(limit=limit, offset=offset, search=search)
    return CandidateListResponse(
        candidates=[CandidateResponse.from_candidate(c) for c in candidates],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{candidate_id}", response_model=CandidateResponse, responses={404: {"model": ErrorResponse}})
def get_candidate(candidate_id: str, service: CandidateService = Depends(get_candidate_service)):
    try:
        return CandidateResponse.from_candidate(service.get_candidate(candidate_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{candidate_id}", response_model=CandidateResponse,
            responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
def update_candidate(
    candidate_id: str,
    request: CandidateUpdateRequest,
    db: Session = Depends(get_db),
    service: CandidateService = Depends(get_candidate_service),
):
    """Partial update: only the fields present in the body are changed."""
    try:
        candidate = service.update_candidate(candidate_id, request.model_dump(exclude_unset=True))
        return CandidateResponse.from_candidate(candidate)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Email is already used by another candidate")


@router.delete("/{candidate_id}", status_code=status.HTTP_204_NO_CONTENT, responses={404: {"model": ErrorResponse}})
def delete_candidate(candidate_id: str, service: CandidateService = Depends(get_candidate_service)):
    try:
        service.delete_candidate(candidate_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{candidate_id}/cv", response_model=CandidateResponse,
             responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
def upload_cv(
    candidate_id: str,
    file: UploadFile = File(...),
    service: CandidateService = Depends(get_candidate_service),
):
    """
    Upload a CV file for a candidate.

    The file is stored and its text is extracted right away into the
    searchable CV text. A file whose text cannot be read is still stored.
    """
    try:
        file_content = file.file.read()
        candidate = service.attach_cv(candidate_id, file_content, file.filename, file.content_type)
        return CandidateResponse.from_candidate(candidate)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{candidate_id}/events", response_model=CandidateEventListResponse,
            responses={404: {"model": ErrorResponse}})
def get_candidate_events(candidate_id: str, service: CandidateService = Depends(get_candidate_service)):
    try:
        events = service.get_events(candidate_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CandidateEventListResponse(
        events=[
            CandidateEventResponse(
                id=event.id,
                candidate_id=event.candidate_id,
                event_type=event.event_type,
                description=event.description,
                metadata=event.event_metadata,
                created_at=event.created_at,
            )
            for event in events
        ]
    )
