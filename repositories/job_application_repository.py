"""Repository for job applications (candidate <-> job links)."""

import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.job_application import JobApplication
from repositories.base_repository import BaseRepository
from utils.errors import DuplicateApplicationError

logger = logging.getLogger(__name__)


class JobApplicationRepository(BaseRepository[JobApplication]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, JobApplication)

    def get_for_candidate_and_job(self, candidate_id: str, job_id: str) -> Optional[JobApplication]:
        statement = select(JobApplication).where(
            (JobApplication.candidate_id == candidate_id)
            & (JobApplication.job_id == job_id)
        )
        return self.db.exec(statement).first()

    def create_application(self, application: JobApplication) -> JobApplication:
        """
        Insert an application.

        Raises:
            DuplicateApplicationError: The candidate already applied to the job
                (checked up front and enforced by the unique constraint)
        """
        existing = self.get_for_candidate_and_job(application.candidate_id, application.job_id)
        if existing:
            raise DuplicateApplicationError(existing)

        self.db.add(application)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_for_candidate_and_job(application.candidate_id, application.job_id)
            if existing is None:
                raise
            raise DuplicateApplicationError(existing)
        self.db.refresh(application)
        logger.info(f"Created application of candidate {application.candidate_id} to job {application.job_id}")
        return application

    def list_applications(
        self,
        job_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
    ) -> List[JobApplication]:
        """Applications, newest first, optionally filtered by job and/or candidate."""
        statement = select(JobApplication)
        if job_id:
            statement = statement.where(JobApplication.job_id == job_id)
        if candidate_id:
            statement = statement.where(JobApplication.candidate_id == candidate_id)
        statement = statement.order_by(JobApplication.applied_at.desc())
        return list(self.db.exec(statement).all())

    def delete_by_candidate(self, candidate_id: str) -> None:
        for application in self.list_applications(candidate_id=candidate_id):
            self.db.delete(application)
        self.db.commit()

    def delete_by_job(self, job_id: str) -> None:
        for application in self.list_applications(job_id=job_id):
            self.db.delete(application)
        self.db.commit()
