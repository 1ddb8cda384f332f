from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from models.job_application import ApplicationStatus


class JobApplicationCreateRequest(BaseModel):
    """Schema for linking a candidate to a job"""
    candidate_id: str = Field(..., min_length=1)
    job_id: str = Field(..., min_length=1)
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    notes: Optional[str] = None

    class Config:
        use_enum_values = True


class JobApplicationUpdateRequest(BaseModel):
    status: Optional[ApplicationStatus] = None
    interview_date: Optional[datetime] = None
    notes: Optional[str] = None
    client_feedback: Optional[str] = None

    class Config:
        use_enum_values = True


class JobApplicationResponse(BaseModel):
    id: str
    candidate_id: str
    job_id: str
    status: str
    applied_at: datetime
    interview_date: Optional[datetime] = None
    notes: Optional[str] = None
    client_feedback: Optional[str] = None

    class Config:
        from_attributes = True


class JobApplicationListResponse(BaseModel):
    applications: List[JobApplicationResponse]


class DuplicateApplicationResponse(BaseModel):
    """409 body: the candidate already applied to this job"""
    detail: str
    existing_application: JobApplicationResponse
