"""
Candidate repository for candidate persistence.

Handles CRUD operations for the candidates table, candidate number
allocation, contact-info matching done inside the database, and the
PostgreSQL full-text query over cached CV text.
"""

import logging
import re
from typing import List, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func, or_

from models.candidate import Candidate, is_placeholder_email, placeholder_email
from repositories.base_repository import BaseRepository
from utils.errors import CandidateNumberExhaustedError, DuplicateCandidateError
from utils.phone import normalize_phone, normalized_phone_sql

logger = logging.getLogger(__name__)

FIRST_CANDIDATE_NUMBER = 100
MAX_NUMBER_ATTEMPTS = 5

_TEXT_SEARCH_CONFIG = re.compile(r"^[a-z_]+$")


class CandidateRepository(BaseRepository[Candidate]):
    """Repository for managing candidates."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, Candidate)

    def get_by_email(self, email: str) -> Optional[Candidate]:
        if not email:
            return None
        query = select(Candidate).where(func.lower(Candidate.email) == email.strip().lower())
        return self.db.exec(query).first()

    def next_candidate_number(self) -> int:
        """Next number after the current maximum (100 for an empty table)."""
        current = self.db.exec(select(func.max(Candidate.candidate_number))).one()
        return FIRST_CANDIDATE_NUMBER if current is None else current + 1

    def create_candidate(self, candidate: Candidate, max_attempts: int = MAX_NUMBER_ATTEMPTS) -> Candidate:
        """
        Insert a candidate with the next candidate number.

        The number is read and written in the same transaction and guarded by
        a UNIQUE constraint: when a concurrent insert took the number first,
        the transaction is rolled back and retried with a fresh one.

        Raises:
            DuplicateCandidateError: Another candidate already owns the email
            CandidateNumberExhaustedError: Every attempt hit a number conflict
        """
        candidate.email = (candidate.email or "").strip().lower() or placeholder_email()
        if candidate.mobile:
            candidate.mobile = normalize_phone(candidate.mobile)

        for attempt in range(1, max_attempts + 1):
            candidate.candidate_number = self.next_candidate_number()
            self.db.add(candidate)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                existing = self.get_by_email(candidate.email)
                if existing is not None:
                    raise DuplicateCandidateError(existing)
                logger.warning(
                    f"Candidate number {candidate.candidate_number} already taken "
                    f"(attempt {attempt}/{max_attempts}), retrying"
                )
                continue
            self.db.refresh(candidate)
            return candidate

        raise CandidateNumberExhaustedError(
            f"Could not allocate a candidate number after {max_attempts} attempts"
        )

    def find_by_contact_info(
        self,
        mobile: Optional[str] = None,
        email: Optional[str] = None,
        national_id: Optional[str] = None,
    ) -> Optional[Candidate]:
        """
        Find the most recently created candidate matching ANY of the keys.

        - mobile: compared after normalization on both sides, in SQL
        - email: case-insensitive; placeholder addresses never match
        - national_id: exact
        """
        conditions = []

        normalized_mobile = normalize_phone(mobile)
        if normalized_mobile:
            conditions.append(normalized_phone_sql(Candidate.mobile) == normalized_mobile)

        if email and email.strip() and not is_placeholder_email(email.strip()):
            conditions.append(func.lower(Candidate.email) == email.strip().lower())

        if national_id and national_id.strip():
            conditions.append(Candidate.national_id == national_id.strip())

        if not conditions:
            return None

        query = (
            select(Candidate)
            .where(or_(*conditions))
            .order_by(Candidate.created_at.desc(), Candidate.candidate_number.desc())
            .limit(1)
        )
        return self.db.exec(query).first()

    def get_paginated(
        self,
        limit: int = 50,
        offset: int = 0,
        search: Optional[str] = None,
    ) -> Tuple[List[Candidate], int]:
        """
        Get candidates, most recent first.

        Args:
            limit: Page size
            offset: Number of records to skip
            search: Optional substring matched against name, email and profession

        Returns:
            Tuple of (candidates, total_count)
        """
        query = select(Candidate)
        count_query = select(func.count(Candidate.id))
        if search:
            pattern = f"%{search.strip()}%"
            full_name = Candidate.first_name + " " + Candidate.last_name
            condition = or_(
                full_name.ilike(pattern),
                Candidate.email.ilike(pattern),
                Candidate.profession.ilike(pattern),
            )
            query = query.where(condition)
            count_query = count_query.where(condition)

        query = query.order_by(Candidate.created_at.desc()).offset(offset).limit(limit)
        candidates = list(self.db.exec(query).all())
        total = self.db.exec(count_query).one()
        return candidates, total

    def list_for_search(self, limit: Optional[int] = None) -> List[Candidate]:
        """All candidates in the default order (most recently created first)."""
        query = select(Candidate).order_by(Candidate.created_at.desc(), Candidate.candidate_number.desc())
        if limit is not None:
            query = query.limit(limit)
        return list(self.db.exec(query).all())

    def list_missing_cv_content(self, limit: int = 100) -> List[Candidate]:
        """Candidates with a stored CV file whose text was never cached."""
        query = (
            select(Candidate)
            .where(Candidate.cv_path.is_not(None), Candidate.cv_content.is_(None))
            .order_by(Candidate.created_at)
            .limit(limit)
        )
        return list(self.db.exec(query).all())

    def search_cv_content(
        self,
        terms: List[str],
        limit: int,
        offset: int,
        text_search_config: str = "english",
    ) -> Tuple[List[Candidate], int]:
        """
        PostgreSQL full-text search over cached CV text.

        All terms must match (AND). Results are ordered by ts_rank, best first.
        The to_tsvector expression is identical to the GIN index expression
        created by the initial migration.
        """
        if not _TEXT_SEARCH_CONFIG.match(text_search_config):
            raise ValueError(f"Invalid text search configuration: {text_search_config}")

        config = sa.literal_column(f"'{text_search_config}'::regconfig")
        vector = func.to_tsvector(config, Candidate.cv_content)
        tsquery = func.to_tsquery(config, " & ".join(terms))
        filters = [Candidate.cv_content.is_not(None), vector.op("@@")(tsquery)]

        total = self.db.exec(select(func.count(Candidate.id)).where(*filters)).one()
        if not total:
            return [], 0

        query = (
            select(Candidate)
            .where(*filters)
            .order_by(func.ts_rank(vector, tsquery).desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.exec(query).all()), total
