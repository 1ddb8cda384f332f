"""
Identity Resolver.

Decides whether incoming contact details belong to a candidate we already
know. Any one key is enough (normalized mobile, email, national ID), so a
recycled phone number can merge two people; that is accepted over creating
duplicate profiles.
"""

import logging
from typing import Optional

from sqlmodel import Session

from models.candidate import Candidate
from repositories.candidate_repository import CandidateRepository
from utils.phone import normalize_phone

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Find an existing candidate by contact info."""

    def __init__(self, db_session: Session, candidate_repo: Optional[CandidateRepository] = None):
        self.candidate_repo = candidate_repo or CandidateRepository(db_session)

    def find_existing(
        self,
        mobile: Optional[str] = None,
        email: Optional[str] = None,
        national_id: Optional[str] = None,
    ) -> Optional[Candidate]:
        """
        Return the most recently created candidate matching any key, or None.

        Placeholder emails (`@temp.local`) are ignored as a key.
        """
        candidate = self.candidate_repo.find_by_contact_info(
            mobile=mobile,
            email=email,
            national_id=national_id,
        )
        if candidate:
            logger.info(
                f"Resolved contact info to candidate #{candidate.candidate_number} "
                f"(mobile={normalize_phone(mobile) or '-'}, email={email or '-'})"
            )
        return candidate
