from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field
import sqlalchemy as sa


class ApplicationStatus(str, Enum):
    SUBMITTED = "submitted"
    REVIEWED = "reviewed"
    INTERVIEW = "interview"
    REJECTED = "rejected"
    ACCEPTED = "accepted"


class JobApplication(SQLModel, table=True):
    """A candidate applying to a job. One application per (candidate, job)."""

    __tablename__ = "job_applications"
    __table_args__ = (
        sa.UniqueConstraint("candidate_id", "job_id", name="uq_job_applications_candidate_job"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    candidate_id: str = Field(foreign_key="candidates.id", index=True)
    job_id: str = Field(foreign_key="jobs.id", index=True)
    status: str = Field(
        default=ApplicationStatus.SUBMITTED.value,
        sa_column=sa.Column(sa.String(), nullable=False, default=ApplicationStatus.SUBMITTED.value),
    )
    applied_at: datetime = Field(default_factory=datetime.utcnow)
    interview_date: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
    client_feedback: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
