"""
Candidate event log.

Timeline entries attached to a candidate (created, CV uploaded, email
received, ...). Descriptions are part of the searchable text when a CV search
includes notes.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field
import sqlalchemy as sa


class CandidateEvent(SQLModel, table=True):
    __tablename__ = "candidate_events"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    candidate_id: str = Field(foreign_key="candidates.id", index=True)
    event_type: str = Field(index=True, description="e.g. created, cv_uploaded, email_received")
    description: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
    event_metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=sa.Column("metadata", sa.JSON(), nullable=True),
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
