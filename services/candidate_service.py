"""
Candidate Service - Business Logic Layer.

Owns the manual candidate flows:
- Creation with identity resolution (duplicates are merged, not re-created)
- Partial updates and deletion
- CV upload: the file is stored under UPLOAD_DIR and its text is cached
  into `cv_content` right away, feeding the full-text index
- CV field extraction for form prefill
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from sqlmodel import Session

from config.settings import settings
from models.candidate import Candidate, is_placeholder_email
from models.candidate_event import CandidateEvent
from models.extracted_fields import ExtractedFields
from repositories import (
    CandidateRepository,
    CandidateEventRepository,
    JobApplicationRepository,
)
from services.field_extraction import extract_fields
from services.identity_resolver import IdentityResolver
from utils.document_extractor import DocumentExtractor
from utils.errors import DuplicateCandidateError, NotFoundError
from utils.phone import normalize_phone

logger = logging.getLogger(__name__)

EVENT_CREATED = "created"
EVENT_MERGED = "duplicate_submission"
EVENT_UPDATED = "updated"
EVENT_CV_UPLOADED = "cv_uploaded"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.\-]")

# Never copied from a create request onto an existing profile
_PROTECTED_FIELDS = {"id", "candidate_number", "created_at", "updated_at", "cv_content"}


class CandidateService:
    """Application service for candidate operations."""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.candidate_repo = CandidateRepository(db_session)
        self.event_repo = CandidateEventRepository(db_session)
        self.application_repo = JobApplicationRepository(db_session)
        self.resolver = IdentityResolver(db_session, self.candidate_repo)

    # ============ CRUD ============

    def get_candidate(self, candidate_id: str) -> Candidate:
        candidate = self.candidate_repo.get_by_id(candidate_id)
        if not candidate:
            raise NotFoundError("Candidate", candidate_id)
        return candidate

    def list_candidates(
        self,
        limit: int = 50,
        offset: int = 0,
        search: Optional[str] = None,
    ) -> Tuple[List[Candidate], int]:
        return self.candidate_repo.get_paginated(limit=limit, offset=offset, search=search)

    def create_candidate(self, data: Dict[str, Any]) -> Tuple[Candidate, bool]:
        """
        Create a candidate unless the contact info resolves to an existing one.

        A match only fills the existing profile's empty fields; populated
        fields are never overwritten.

        Returns:
            (candidate, created) where created is False when merged
        """
        data = self._clean(data)
        existing = self.resolver.find_existing(
            mobile=data.get("mobile"),
            email=data.get("email"),
            national_id=data.get("national_id"),
        )
        if existing:
            return self._merge_into(existing, data), False

        candidate = Candidate(**{
            k: v for k, v in data.items() if k in Candidate.model_fields and k not in _PROTECTED_FIELDS
        })
        try:
            candidate = self.candidate_repo.create_candidate(candidate)
        except DuplicateCandidateError as e:
            logger.info(f"Concurrent insert for {candidate.email}; merging into the stored profile")
            return self._merge_into(e.existing, data), False

        self.event_repo.add_event(
            candidate.id,
            EVENT_CREATED,
            description=f"Candidate #{candidate.candidate_number} created",
            metadata={"source": candidate.recruitment_source},
        )
        logger.info(f"Created candidate #{candidate.candidate_number} ({candidate.id})")
        return candidate, True

    def update_candidate(self, candidate_id: str, changes: Dict[str, Any]) -> Candidate:
        candidate = self.get_candidate(candidate_id)
        changes = {k: v for k, v in self._clean(changes).items() if k not in _PROTECTED_FIELDS}
        if "email" in changes and not changes["email"]:
            del changes["email"]
        updated = self.candidate_repo.update_fields(candidate, changes)
        self.event_repo.add_event(
            updated.id,
            EVENT_UPDATED,
            description="Candidate details updated",
            metadata={"fields": sorted(changes)},
        )
        return updated

    def delete_candidate(self, candidate_id: str) -> None:
        candidate = self.get_candidate(candidate_id)
        self.application_repo.delete_by_candidate(candidate.id)
        self.event_repo.delete_by_candidate(candidate.id)
        cv_path = candidate.cv_path
        self.candidate_repo.delete(candidate)
        if cv_path:
            Path(cv_path).unlink(missing_ok=True)
        logger.info(f"Deleted candidate {candidate_id}")

    def get_events(self, candidate_id: str) -> List[CandidateEvent]:
        self.get_candidate(candidate_id)
        return self.event_repo.get_by_candidate(candidate_id)

    # ============ CV ============

    def attach_cv(
        self,
        candidate_id: str,
        file_content: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Candidate:
        """
        Store an uploaded CV and cache its extracted text.

        An unreadable file is still stored; `cv_content` then stays empty and
        naive search falls back to extracting from the file.
        """
        candidate = self.get_candidate(candidate_id)
        if not file_content:
            raise ValueError("CV file is empty")
        if len(file_content) > settings.MAX_UPLOAD_BYTES:
            raise ValueError(f"CV file exceeds {settings.MAX_UPLOAD_BYTES} bytes")

        path = self._store_file(candidate.id, file_content, filename)
        text = DocumentExtractor.extract_bounded(file_content, content_type, filename)

        candidate.cv_path = str(path)
        candidate.cv_content = text.strip() or None
        candidate = self.candidate_repo.update(candidate)

        self.event_repo.add_event(
            candidate.id,
            EVENT_CV_UPLOADED,
            description=f"CV uploaded: {filename or path.name}",
            metadata={"path": str(path), "text_length": len(text)},
        )
        logger.info(f"Stored CV for candidate {candidate.id} at {path} ({len(text)} chars of text)")
        return candidate

    def backfill_cv_content(self, batch_size: int = 100) -> int:
        """
        Cache CV text for candidates uploaded before text was cached at ingest.

        Returns:
            Number of candidates whose `cv_content` was filled
        """
        filled = 0
        for candidate in self.candidate_repo.list_missing_cv_content(limit=batch_size):
            text = DocumentExtractor.extract_from_path(candidate.cv_path)
            if not text.strip():
                logger.info(f"No text extracted for candidate {candidate.id} ({candidate.cv_path})")
                continue
            candidate.cv_content = text.strip()
            self.candidate_repo.update(candidate)
            filled += 1
        logger.info(f"Backfilled CV text for {filled} candidates")
        return filled

    @staticmethod
    def extract_cv_fields(
        file_content: bytes,
        content_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> ExtractedFields:
        """Guess form fields from an uploaded CV; unreadable input yields empty fields."""
        text = DocumentExtractor.extract_bounded(file_content, content_type, filename)
        if not text.strip():
            logger.info(f"No readable text in {filename or 'upload'}")
            return ExtractedFields()
        return extract_fields(text)

    # ============ HELPERS ============

    @staticmethod
    def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
            cleaned[key] = value
        if cleaned.get("email"):
            cleaned["email"] = cleaned["email"].lower()
        if cleaned.get("mobile"):
            cleaned["mobile"] = normalize_phone(cleaned["mobile"])
        return cleaned

    def _merge_into(self, existing: Candidate, data: Dict[str, Any]) -> Candidate:
        filled = []
        for key, value in data.items():
            if key in _PROTECTED_FIELDS or value in (None, "", []) or not hasattr(existing, key):
                continue
            if key == "email":
                if not is_placeholder_email(existing.email) or is_placeholder_email(value):
                    continue
                owner = self.candidate_repo.get_by_email(value)
                if owner is not None and owner.id != existing.id:
                    logger.warning(
                        f"Not moving {value} onto candidate #{existing.candidate_number}: "
                        f"owned by #{owner.candidate_number}"
                    )
                else:
                    existing.email = value
                    filled.append(key)
                continue
            if not getattr(existing, key):
                setattr(existing, key, value)
                filled.append(key)

        if filled:
            existing = self.candidate_repo.update(existing)
        self.event_repo.add_event(
            existing.id,
            EVENT_MERGED,
            description="Submitted details matched this candidate",
            metadata={"filled_fields": filled},
        )
        logger.info(f"Merged submission into candidate #{existing.candidate_number} (filled: {filled})")
        return existing

    @staticmethod
    def _store_file(candidate_id: str, file_content: bytes, filename: Optional[str]) -> Path:
        safe_name = _UNSAFE_FILENAME_CHARS.sub("_", Path(filename or "cv").name) or "cv"
        directory = Path(settings.UPLOAD_DIR) / candidate_id
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{uuid4().hex[:8]}_{safe_name}"
        path.write_bytes(file_content)
        return path
