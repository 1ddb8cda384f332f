"""
Integration tests for the inbound email pipeline.

Run: pytest tests/integration/test_inbound_pipeline.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from sqlmodel import select

from models.candidate import Candidate, UNSPECIFIED_CITY
from models.job_application import ApplicationStatus, JobApplication
from repositories import CandidateEventRepository
from services.inbound_email_service import (
    EVENT_EMAIL_RECEIVED,
    INBOUND_SOURCE,
    PLACEHOLDER_FIRST_NAME,
    InboundEmailPipeline,
    InboundOutcome,
)

SUBJECT = "מועמדות למשרה #123456"
BODY = "שם: דנה כהן\n050-1234567\ndana@example.com"
FROM = "Dana <dana@example.com>"


@pytest.fixture
def pipeline(db_session):
    return InboundEmailPipeline(db_session)


def all_candidates(db_session):
    return list(db_session.exec(select(Candidate)).all())


def all_applications(db_session):
    return list(db_session.exec(select(JobApplication)).all())


class TestNewCandidate:

    def test_creates_candidate_and_application(self, pipeline, db_session, make_job):
        job = make_job("Field technician", description="Reference 123456, north region")

        outcome = pipeline.process_message(SUBJECT, BODY, FROM)

        assert outcome == InboundOutcome.CREATED
        candidates = all_candidates(db_session)
        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.candidate_number == 100
        assert (candidate.first_name, candidate.last_name) == ("דנה", "כהן")
        assert candidate.email == "dana@example.com"
        assert candidate.mobile == "0501234567"
        assert candidate.city == UNSPECIFIED_CITY
        assert candidate.recruitment_source == INBOUND_SOURCE
        assert SUBJECT in candidate.notes

        applications = all_applications(db_session)
        assert len(applications) == 1
        assert applications[0].candidate_id == candidate.id
        assert applications[0].job_id == job.id
        assert applications[0].status == ApplicationStatus.SUBMITTED.value
        assert "123456" in applications[0].notes

        events = CandidateEventRepository(db_session).get_by_candidate(candidate.id)
        assert [e.event_type for e in events] == [EVENT_EMAIL_RECEIVED]

    def test_job_code_matches_title(self, pipeline, db_session, make_job):
        job = make_job("Technician 123456")
        pipeline.process_message(SUBJECT, BODY, FROM)
        assert [a.job_id for a in all_applications(db_session)] == [job.id]

    def test_job_code_matches_job_id(self, pipeline, db_session, make_job):
        job = make_job("Technician")
        pipeline.process_message(f"cv - Job ID: {job.id}", "dana@example.com", "")
        assert [a.job_id for a in all_applications(db_session)] == [job.id]

    def test_job_code_matches_job_code_column(self, pipeline, db_session, make_job):
        job = make_job("Electrician", job_code="EL-7")
        pipeline.process_message("קורות חיים - קוד משרה: EL-7", "dana@example.com", "")
        assert [a.job_id for a in all_applications(db_session)] == [job.id]

    def test_unknown_job_code_stores_candidate_only(self, pipeline, db_session, make_job):
        make_job("Electrician", job_code="EL-7")
        outcome = pipeline.process_message("מועמדות למשרה #999999", "dana@example.com", "")

        assert outcome == InboundOutcome.CREATED
        assert len(all_candidates(db_session)) == 1
        assert all_applications(db_session) == []

    def test_placeholder_name_when_none_found(self, pipeline, db_session):
        pipeline.process_message("cv", "מצורף", "jsmith@example.com")
        candidate = all_candidates(db_session)[0]
        assert candidate.first_name == PLACEHOLDER_FIRST_NAME


class TestRepeatedMessage:

    def test_second_message_merges(self, pipeline, db_session, make_job):
        make_job("Field technician", description="Reference 123456")
        pipeline.process_message(SUBJECT, BODY, FROM)

        outcome = pipeline.process_message(SUBJECT, BODY, FROM)

        assert outcome == InboundOutcome.UPDATED
        candidates = all_candidates(db_session)
        assert len(candidates) == 1
        assert len(all_applications(db_session)) == 1
        assert "--- מייל חדש ---" in candidates[0].notes
        assert candidates[0].notes.count(SUBJECT) == 2

    def test_match_by_phone_keeps_stored_email(self, pipeline, db_session):
        pipeline.process_message("cv", BODY, FROM)
        outcome = pipeline.process_message("cv", "050 123 4567\nnew.address@example.com", "")

        assert outcome == InboundOutcome.UPDATED
        assert all_candidates(db_session)[0].email == "dana@example.com"

    def test_placeholder_name_filled_by_later_message(self, pipeline, db_session):
        pipeline.process_message("cv", "מצורף", "jsmith@example.com")
        pipeline.process_message("cv", "שם: יוסי לוי\n", "jsmith@example.com")

        candidate = all_candidates(db_session)[0]
        assert (candidate.first_name, candidate.last_name) == ("יוסי", "לוי")

    def test_real_name_not_overwritten(self, pipeline, db_session):
        pipeline.process_message("cv", BODY, FROM)
        pipeline.process_message("cv", "שם: יוסי לוי\ndana@example.com", "")
        assert all_candidates(db_session)[0].first_name == "דנה"


class TestSkippedMessages:

    def test_not_an_application(self, pipeline, db_session):
        outcome = pipeline.process_message("Lunch tomorrow", "see you at noon", "bob@example.com")
        assert outcome == InboundOutcome.IGNORED
        assert all_candidates(db_session) == []

    def test_no_email_found(self, pipeline, db_session):
        outcome = pipeline.process_message("קורות חיים", "050-1234567", "")
        assert outcome == InboundOutcome.SKIPPED_NO_EMAIL
        assert all_candidates(db_session) == []

    def test_none_fields(self, pipeline):
        assert pipeline.process_message(None, None, None) == InboundOutcome.IGNORED
