from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field
import sqlalchemy as sa

PLACEHOLDER_EMAIL_DOMAIN = "temp.local"
UNSPECIFIED_CITY = "לא צוין"


class CandidateStatus(str, Enum):
    AVAILABLE = "available"
    EMPLOYED = "employed"
    INACTIVE = "inactive"
    BLACKLISTED = "blacklisted"


class Candidate(SQLModel, table=True):
    """
    Candidate profile.

    `candidate_number` is the human-readable number shown to recruiters. It is
    unique at the database level; the repository allocates max + 1 and retries
    on conflict. Email is required and unique, stored lowercased; candidates
    created without one get a `<token>@temp.local` placeholder.
    """

    __tablename__ = "candidates"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    candidate_number: int = Field(sa_column=sa.Column(sa.Integer(), unique=True, nullable=False))

    # Identity and contact
    first_name: str = Field(default="")
    last_name: str = Field(default="")
    email: str = Field(sa_column=sa.Column(sa.String(), unique=True, nullable=False))
    mobile: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    phone2: Optional[str] = None
    national_id: Optional[str] = Field(default=None, index=True)
    city: Optional[str] = None
    street: Optional[str] = None
    house_number: Optional[str] = None
    zip_code: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    driving_license: Optional[str] = None

    # Professional
    profession: Optional[str] = None
    experience: Optional[int] = None  # years of experience
    expected_salary: Optional[int] = None
    achievements: Optional[str] = None

    # Recruitment metadata
    recruitment_source: Optional[str] = None
    status: str = Field(
        default=CandidateStatus.AVAILABLE.value,
        sa_column=sa.Column(sa.String(), nullable=False, default=CandidateStatus.AVAILABLE.value),
    )
    rating: Optional[int] = None  # 1-5 rating
    notes: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))
    tags: List[str] = Field(default_factory=list, sa_column=sa.Column(sa.JSON(), nullable=True))

    # CV file and its cached text (source of the full-text index)
    cv_path: Optional[str] = None
    cv_content: Optional[str] = Field(default=None, sa_column=sa.Column(sa.Text(), nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def has_placeholder_email(self) -> bool:
        return is_placeholder_email(self.email)


def is_placeholder_email(email: Optional[str]) -> bool:
    """Sentinel addresses never take part in identity matching."""
    return not email or email.lower().endswith("@" + PLACEHOLDER_EMAIL_DOMAIN)


def placeholder_email() -> str:
    return f"candidate-{uuid4().hex[:12]}@{PLACEHOLDER_EMAIL_DOMAIN}"
