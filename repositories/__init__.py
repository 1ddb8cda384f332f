"""
Repositories module - Data Access Layer.

Provides repository classes for database operations following the Repository pattern.
Each repository handles CRUD operations for a specific domain entity.

Usage:
    from repositories import CandidateRepository, JobRepository

    candidate_repo = CandidateRepository(db_session)
    candidate = candidate_repo.find_by_contact_info(mobile="050-1234567")
"""

from repositories.base_repository import BaseRepository
from repositories.candidate_repository import CandidateRepository
from repositories.candidate_event_repository import CandidateEventRepository
from repositories.job_repository import JobRepository
from repositories.job_application_repository import JobApplicationRepository

__all__ = [
    "BaseRepository",
    "CandidateRepository",
    "CandidateEventRepository",
    "JobRepository",
    "JobApplicationRepository",
]
