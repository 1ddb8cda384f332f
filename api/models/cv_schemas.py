from pydantic import BaseModel, Field
from typing import List

from api.models.candidate_schemas import CandidateResponse
from models.extracted_fields import SearchResult


class CVSearchRequest(BaseModel):
    """Schema for naive CV keyword search"""
    positive_keywords: List[str] = Field(default_factory=list, description="At least one must appear (when given)")
    negative_keywords: List[str] = Field(default_factory=list, description="None may appear")
    include_notes: bool = Field(False, description="Also search notes and event descriptions")

    class Config:
        json_schema_extra = {
            "example": {
                "positive_keywords": ["Java", "Python"],
                "negative_keywords": ["Junior"],
                "include_notes": False,
            }
        }


class CVSearchResponse(BaseModel):
    results: List[SearchResult]
    total: int


class IndexedSearchResponse(BaseModel):
    candidates: List[CandidateResponse]
    total: int
    limit: int
    offset: int
