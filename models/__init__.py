from models.candidate import Candidate, CandidateStatus
from models.candidate_event import CandidateEvent
from models.job import Job, JobStatus
from models.job_application import JobApplication, ApplicationStatus
from models.extracted_fields import ExtractedFields, SearchResult, InboundParsedCandidate

__all__ = [
    "Candidate",
    "CandidateStatus",
    "CandidateEvent",
    "Job",
    "JobStatus",
    "JobApplication",
    "ApplicationStatus",
    "ExtractedFields",
    "SearchResult",
    "InboundParsedCandidate",
]
