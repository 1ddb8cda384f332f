from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from models.job import JobStatus


class JobCreateRequest(BaseModel):
    """Schema for creating a job"""
    title: str = Field(..., min_length=1)
    job_code: Optional[str] = Field(None, description="Short public code quoted by applicants")
    description: str = ""
    requirements: Optional[str] = None
    location: Optional[str] = None
    status: JobStatus = JobStatus.ACTIVE
    positions: int = Field(1, ge=1)

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "title": "Backend Developer",
                "job_code": "123456",
                "description": "Python, PostgreSQL",
                "location": "תל אביב",
            }
        }


class JobUpdateRequest(BaseModel):
    """Schema for a partial job update"""
    title: Optional[str] = Field(None, min_length=1)
    job_code: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None
    status: Optional[JobStatus] = None
    positions: Optional[int] = Field(None, ge=1)

    class Config:
        use_enum_values = True


class JobResponse(BaseModel):
    id: str
    job_code: Optional[str] = None
    title: str
    description: str = ""
    requirements: Optional[str] = None
    location: Optional[str] = None
    status: str
    positions: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int
    limit: int
    offset: int
