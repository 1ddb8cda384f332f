"""
Transient records produced by the CV ingestion pipeline.

None of these are tables; they live for one request or one inbound message.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ExtractedFields(BaseModel):
    """
    Fields guessed from CV text.

    Every field is optional: an empty string (or None for experience) means
    the heuristic found nothing, never an error.
    """

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    mobile: str = ""
    phone: str = ""
    phone2: str = ""
    national_id: str = ""
    city: str = ""
    street: str = ""
    house_number: str = ""
    zip_code: str = ""
    gender: str = ""
    marital_status: str = ""
    driving_license: str = ""
    profession: str = ""
    experience: Optional[int] = None
    achievements: str = ""

    def is_empty(self) -> bool:
        return not any(value for value in self.model_dump().values())


class SearchResult(BaseModel):
    """One naive CV search hit."""

    candidate_id: str
    first_name: str = ""
    last_name: str = ""
    city: str = ""
    phone: str = ""
    email: str = ""
    matched_keywords: List[str] = Field(default_factory=list)
    cv_preview: str = ""
    extracted_at: Optional[datetime] = None


class InboundParsedCandidate(BaseModel):
    """Candidate details parsed from one inbound email."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    job_code: Optional[str] = None
    original_subject: str = ""
    original_body: str = ""
