"""
CV Content Search.

Two independent modes:
- naive: scans every candidate's searchable text with positive/negative
  keywords (supports exclusion and CVs whose text was never cached)
- indexed: PostgreSQL full-text search over cached `cv_content`, ranked by
  relevance and paginated (no exclusion)
"""

import logging
import re
from typing import List, Optional, Tuple

from sqlmodel import Session

from config.settings import settings
from models.candidate import Candidate
from models.extracted_fields import SearchResult
from repositories import CandidateRepository, CandidateEventRepository
from utils.document_extractor import DocumentExtractor
from utils.worker_pool import run_with_timeout

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 500

_TERM = re.compile(r"\w+")


def _clean_keywords(keywords: Optional[List[str]]) -> List[str]:
    return [k.strip() for k in (keywords or []) if k and k.strip()]


def contains_keyword(text: str, keyword: str) -> bool:
    """Case-insensitive substring test."""
    if not text or not keyword:
        return False
    return keyword.lower() in text.lower()


def split_search_terms(query: Optional[str]) -> List[str]:
    """Space-separated terms reduced to word characters, so they are safe inside a tsquery."""
    if not query:
        return []
    terms = []
    for raw in query.split():
        term = "".join(_TERM.findall(raw))
        if term:
            terms.append(term)
    return terms


class CVSearchService:
    """Search candidates by CV content."""

    def __init__(self, db_session: Session):
        self.candidate_repo = CandidateRepository(db_session)
        self.event_repo = CandidateEventRepository(db_session)

    def search(
        self,
        positive_keywords: Optional[List[str]] = None,
        negative_keywords: Optional[List[str]] = None,
        include_notes: bool = False,
    ) -> List[SearchResult]:
        """
        Naive keyword search, most recently created candidates first.

        A candidate matches when no positive keywords are given or at least one
        occurs in its searchable text, and none of the negative keywords occur.
        Results stop at NAIVE_SEARCH_MAX_RESULTS.
        """
        positives = _clean_keywords(positive_keywords)
        negatives = _clean_keywords(negative_keywords)
        max_results = settings.NAIVE_SEARCH_MAX_RESULTS
        logger.info(
            f"Naive CV search: positive={positives}, negative={negatives}, include_notes={include_notes}"
        )

        results: List[SearchResult] = []
        for candidate in self.candidate_repo.list_for_search():
            text = self.build_searchable_text(candidate, include_notes)

            matched = [k for k in positives if contains_keyword(text, k)]
            if positives and not matched:
                continue
            if any(contains_keyword(text, k) for k in negatives):
                continue

            results.append(
                SearchResult(
                    candidate_id=candidate.id,
                    first_name=candidate.first_name or "",
                    last_name=candidate.last_name or "",
                    city=candidate.city or "",
                    phone=candidate.mobile or "",
                    email=candidate.email or "",
                    matched_keywords=matched,
                    cv_preview=text[:PREVIEW_LENGTH],
                    extracted_at=candidate.created_at,
                )
            )
            if len(results) >= max_results:
                logger.info(f"Naive CV search stopped at {max_results} results")
                break

        logger.info(f"Naive CV search matched {len(results)} candidates")
        return results

    def build_searchable_text(self, candidate: Candidate, include_notes: bool = False) -> str:
        """
        Name and profession, then CV text, then (optionally) notes and event descriptions.

        A CV that was never cached is extracted from its file for this call only.
        """
        parts = [f"{candidate.first_name or ''} {candidate.last_name or ''} {candidate.profession or ''}".strip()]

        if candidate.cv_content:
            parts.append(candidate.cv_content)
        elif candidate.cv_path:
            extracted = run_with_timeout(
                DocumentExtractor.extract_from_path,
                candidate.cv_path,
                timeout=settings.EXTRACTION_TIMEOUT_SECONDS + 5,
                default="",
            )
            if extracted:
                parts.append(extracted)

        if include_notes:
            if candidate.notes:
                parts.append(candidate.notes)
            descriptions = [
                event.description
                for event in self.event_repo.get_by_candidate(candidate.id)
                if event.description and event.description.strip()
            ]
            if descriptions:
                parts.append(" ".join(descriptions))

        return " ".join(part for part in parts if part)

    def search_indexed(
        self,
        query: Optional[str],
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Candidate], int]:
        """
        Relevance-ranked full-text search; all terms must match.

        An empty query returns ([], 0) without querying the database.
        """
        terms = split_search_terms(query)
        if not terms:
            return [], 0

        candidates, total = self.candidate_repo.search_cv_content(
            terms,
            limit=limit,
            offset=offset,
            text_search_config=settings.TEXT_SEARCH_CONFIG,
        )
        logger.info(f"Indexed CV search for {terms}: {total} matches")
        return candidates, total
