"""Job application flows (manual creation, status updates)."""

import logging
from typing import Any, Dict, List, Optional

from sqlmodel import Session

from models.job_application import ApplicationStatus, JobApplication
from repositories import CandidateRepository, JobRepository, JobApplicationRepository
from utils.errors import NotFoundError

logger = logging.getLogger(__name__)


class JobApplicationService:

    def __init__(self, db_session: Session):
        self.application_repo = JobApplicationRepository(db_session)
        self.candidate_repo = CandidateRepository(db_session)
        self.job_repo = JobRepository(db_session)

    def create_application(
        self,
        candidate_id: str,
        job_id: str,
        status: str = ApplicationStatus.SUBMITTED.value,
        notes: Optional[str] = None,
    ) -> JobApplication:
        """
        Link a candidate to a job.

        Raises:
            NotFoundError: Unknown candidate or job
            DuplicateApplicationError: The pair already exists; carries the existing record
        """
        if not self.candidate_repo.exists(candidate_id):
            raise NotFoundError("Candidate", candidate_id)
        if not self.job_repo.exists(job_id):
            raise NotFoundError("Job", job_id)

        application = JobApplication(
            candidate_id=candidate_id,
            job_id=job_id,
            status=status,
            notes=notes,
        )
        return self.application_repo.create_application(application)

    def list_applications(
        self,
        job_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
    ) -> List[JobApplication]:
        return self.application_repo.list_applications(job_id=job_id, candidate_id=candidate_id)

    def update_application(self, application_id: str, changes: Dict[str, Any]) -> JobApplication:
        application = self.application_repo.get_by_id(application_id)
        if not application:
            raise NotFoundError("JobApplication", application_id)
        changes = {k: v for k, v in changes.items() if k not in ("id", "candidate_id", "job_id")}
        return self.application_repo.update_fields(application, changes)

    def delete_application(self, application_id: str) -> None:
        if not self.application_repo.delete_by_id(application_id):
            raise NotFoundError("JobApplication", application_id)
