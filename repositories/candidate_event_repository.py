"""Repository for the candidate event log."""

from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from models.candidate_event import CandidateEvent
from repositories.base_repository import BaseRepository


class CandidateEventRepository(BaseRepository[CandidateEvent]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, CandidateEvent)

    def add_event(
        self,
        candidate_id: str,
        event_type: str,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> CandidateEvent:
        event = CandidateEvent(
            candidate_id=candidate_id,
            event_type=event_type,
            description=description,
            event_metadata=metadata,
        )
        return self.create(event)

    def get_by_candidate(self, candidate_id: str) -> List[CandidateEvent]:
        """Events of a candidate, newest first."""
        statement = (
            select(CandidateEvent)
            .where(CandidateEvent.candidate_id == candidate_id)
            .order_by(CandidateEvent.created_at.desc())
        )
        return list(self.db.exec(statement).all())

    def delete_by_candidate(self, candidate_id: str) -> None:
        for event in self.get_by_candidate(candidate_id):
            self.db.delete(event)
        self.db.commit()
