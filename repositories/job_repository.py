"""
Job repository.

Besides CRUD, resolves the free-form job reference codes quoted in inbound
applications.
"""

from typing import List, Optional, Tuple
from sqlmodel import Session, select, func, or_

from models.job import Job
from repositories.base_repository import BaseRepository


class JobRepository(BaseRepository[Job]):
    """Repository for managing jobs."""

    def __init__(self, db_session: Session):
        super().__init__(db_session, Job)

    def get_paginated(
        self,
        limit: int = 50,
        offset: int = 0,
        search: Optional[str] = None,
    ) -> Tuple[List[Job], int]:
        query = select(Job)
        count_query = select(func.count(Job.id))
        if search:
            pattern = f"%{search.strip()}%"
            condition = or_(Job.title.ilike(pattern), Job.description.ilike(pattern))
            query = query.where(condition)
            count_query = count_query.where(condition)

        query = query.order_by(Job.created_at.desc()).offset(offset).limit(limit)
        return list(self.db.exec(query).all()), self.db.exec(count_query).one()

    def find_by_reference_code(self, code: str) -> Optional[Job]:
        """
        Best-effort lookup of a job reference code.

        Matches the job id, the job code, or a job whose title or description
        contains the code. The first (most recent) match wins.
        """
        if not code:
            return None
        query = (
            select(Job)
            .where(
                or_(
                    Job.id == code,
                    Job.job_code == code,
                    Job.title.contains(code),
                    Job.description.contains(code),
                )
            )
            .order_by(Job.created_at.desc())
            .limit(1)
        )
        return self.db.exec(query).first()
