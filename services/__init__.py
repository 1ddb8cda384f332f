"""
Services module - Business Logic Layer.

Contains application services that orchestrate business logic,
sitting between the API layer (routes) and the data layer (repositories).

Services handle:
- Identity resolution and candidate creation/merging
- CV text caching and field extraction
- CV content search (naive and full-text)
- The inbound email pipeline and its mail poller

Usage:
    from services import CandidateService

    service = CandidateService(db_session)
    candidate, created = service.create_candidate({"email": "a@b.com"})
"""

from services.candidate_service import CandidateService
from services.cv_search_service import CVSearchService
from services.identity_resolver import IdentityResolver
from services.inbound_email_service import InboundEmailPipeline, InboundOutcome
from services.job_application_service import JobApplicationService

__all__ = [
    "CandidateService",
    "CVSearchService",
    "IdentityResolver",
    "InboundEmailPipeline",
    "InboundOutcome",
    "JobApplicationService",
]
