from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlmodel import Session
from typing import Optional

from api.auth import verify_api_key
from api.models.candidate_schemas import CandidateResponse
from api.models.common_schemas import ErrorResponse
from api.models.cv_schemas import CVSearchRequest, CVSearchResponse, IndexedSearchResponse
from config.settings import settings
from models.extracted_fields import ExtractedFields
from services.candidate_service import CandidateService
from services.cv_search_service import CVSearchService
from utils.database import get_db

router = APIRouter(
    prefix="/cv",
    tags=["CV"],
    dependencies=[Depends(verify_api_key)]
)


def get_search_service(db: Session = Depends(get_db)) -> CVSearchService:
    return CVSearchService(db)


@router.post("/extract", response_model=ExtractedFields, responses={400: {"model": ErrorResponse}})
def extract_cv_data(file: Optional[UploadFile] = File(None)):
    """
    Guess candidate form fields from an uploaded CV (.docx, .pdf or text).

    Unreadable files are not an error: every field comes back empty.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No CV file uploaded")

    file_content = file.file.read()
    if len(file_content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail=f"CV file exceeds {settings.MAX_UPLOAD_BYTES} bytes")
    return CandidateService.extract_cv_fields(file_content, file.content_type, file.filename)


@router.post("/search", response_model=CVSearchResponse, responses={500: {"model": ErrorResponse}})
def search_cvs(request: CVSearchRequest, service: CVSearchService = Depends(get_search_service)):
    """
    Keyword search over every candidate's CV text.

    A candidate matches when any positive keyword appears (or none are given)
    and no negative keyword appears. Matching is a case-insensitive substring
    test. Results are most recently created first.
    """
    try:
        results = service.search(
            positive_keywords=request.positive_keywords,
            negative_keywords=request.negative_keywords,
            include_notes=request.include_notes,
        )
        return CVSearchResponse(results=results, total=len(results))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"CV search failed: {str(e)}")


@router.get("/search", response_model=IndexedSearchResponse, responses={500: {"model": ErrorResponse}})
def search_cvs_indexed(
    q: str = Query("", description="Space-separated terms; all must match"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: CVSearchService = Depends(get_search_service),
):
    """Full-text search over cached CV text, best matches first."""
    try:
        candidates, total = service.search_indexed(q, limit=limit, offset=offset)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"CV search failed: {str(e)}")
    return IndexedSearchResponse(
        candidates=[CandidateResponse.from_candidate(c) for c in candidates],
        total=total,
        limit=limit,
        offset=offset,
    )
