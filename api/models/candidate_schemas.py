from datetime import datetime
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from models.candidate import CandidateStatus


# ============ Request Schemas ============

class CandidateFields(BaseModel):
    """Editable candidate fields shared by create and update requests"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = Field(None, description="Stored lowercased; a placeholder is generated when missing")
    mobile: Optional[str] = Field(None, description="Stored in normalized 0XXXXXXXXX form")
    phone: Optional[str] = None
    phone2: Optional[str] = None
    national_id: Optional[str] = None
    city: Optional[str] = None
    street: Optional[str] = None
    house_number: Optional[str] = None
    zip_code: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    driving_license: Optional[str] = None
    profession: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0, description="Years of experience")
    expected_salary: Optional[int] = Field(None, ge=0)
    achievements: Optional[str] = None
    recruitment_source: Optional[str] = None
    status: Optional[CandidateStatus] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None
    tags: Optional[List[str]] = None

    class Config:
        use_enum_values = True


class CandidateCreateRequest(CandidateFields):
    """Schema for creating a candidate (merged into an existing one when contact info matches)"""

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "first_name": "דנה",
                "last_name": "כהן",
                "email": "dana.cohen@example.com",
                "mobile": "050-1234567",
                "city": "תל אביב",
                "profession": "מפתחת",
            }
        }


class CandidateUpdateRequest(CandidateFields):
    """Schema for a partial candidate update; only fields sent are changed"""


# ============ Response Schemas ============

class CandidateResponse(BaseModel):
    id: str
    candidate_number: int
    first_name: str = ""
    last_name: str = ""
    email: str
    mobile: Optional[str] = None
    phone: Optional[str] = None
    phone2: Optional[str] = None
    national_id: Optional[str] = None
    city: Optional[str] = None
    street: Optional[str] = None
    house_number: Optional[str] = None
    zip_code: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    driving_license: Optional[str] = None
    profession: Optional[str] = None
    experience: Optional[int] = None
    expected_salary: Optional[int] = None
    achievements: Optional[str] = None
    recruitment_source: Optional[str] = None
    status: str
    rating: Optional[int] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    cv_path: Optional[str] = None
    has_cv_text: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_candidate(cls, candidate) -> "CandidateResponse":
        response = cls.model_validate(candidate)
        response.has_cv_text = bool(candidate.cv_content)
        return response


class CandidateListResponse(BaseModel):
    candidates: List[CandidateResponse]
    total: int
    limit: int
    offset: int


class CandidateEventResponse(BaseModel):
    id: str
    candidate_id: str
    event_type: str
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime


class CandidateEventListResponse(BaseModel):
    events: List[CandidateEventResponse]
