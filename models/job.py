from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field
import sqlalchemy as sa


class JobStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class Job(SQLModel, table=True):
    """Job posting. `job_code` is the short code quoted by applicants."""

    __tablename__ = "jobs"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    job_code: Optional[str] = Field(default=None, sa_column=sa.Column(sa.String(), unique=True, nullable=True))
    title: str
    description: str = Field(default="", sa_column=sa.Column(sa.Text(), nullable=False, default=""))
    requirements: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
    location: Optional[str] = None
    status: str = Field(
        default=JobStatus.ACTIVE.value,
        sa_column=sa.Column(sa.String(), nullable=False, default=JobStatus.ACTIVE.value),
    )
    positions: int = Field(default=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
