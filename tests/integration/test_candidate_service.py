"""
Integration tests for CandidateService: manual create/merge, CV upload,
text backfill and deletion.

Run: pytest tests/integration/test_candidate_service.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from models.candidate import Candidate
from models.job_application import JobApplication
from repositories import CandidateEventRepository, JobApplicationRepository
from services.candidate_service import (
    EVENT_CREATED,
    EVENT_CV_UPLOADED,
    EVENT_MERGED,
    CandidateService,
)
from utils.errors import NotFoundError


@pytest.fixture
def service(db_session):
    return CandidateService(db_session)


def event_types(db_session, candidate_id):
    return [e.event_type for e in CandidateEventRepository(db_session).get_by_candidate(candidate_id)]


class TestCreateCandidate:

    def test_creates_new_candidate(self, service, db_session):
        candidate, created = service.create_candidate({
            "first_name": " דנה ",
            "last_name": "כהן",
            "email": "Dana@Example.com",
            "mobile": "050-1234567",
            "city": "חיפה",
        })

        assert created is True
        assert candidate.candidate_number == 100
        assert candidate.first_name == "דנה"
        assert candidate.email == "dana@example.com"
        assert candidate.mobile == "0501234567"
        assert event_types(db_session, candidate.id) == [EVENT_CREATED]

    def test_unknown_keys_are_ignored(self, service):
        candidate, created = service.create_candidate({"email": "x@example.com", "favourite_color": "blue"})
        assert created is True

    def test_match_fills_only_empty_fields(self, service, db_session):
        original, _ = service.create_candidate({
            "first_name": "דנה",
            "email": "dana@example.com",
            "mobile": "0501234567",
            "city": "חיפה",
        })

        merged, created = service.create_candidate({
            "first_name": "דניאלה",
            "email": "dana.other@example.com",
            "mobile": "+972-50-123-4567",
            "city": "תל אביב",
            "profession": "developer",
        })

        assert created is False
        assert merged.id == original.id
        assert merged.first_name == "דנה"
        assert merged.city == "חיפה"
        assert merged.email == "dana@example.com"
        assert merged.profession == "developer"
        assert event_types(db_session, merged.id)[0] == EVENT_MERGED

    def test_placeholder_email_replaced_on_match(self, service):
        original, _ = service.create_candidate({"first_name": "דנה", "mobile": "0501234567"})
        assert original.has_placeholder_email

        merged, created = service.create_candidate({"mobile": "0501234567", "email": "dana@example.com"})

        assert created is False
        assert merged.email == "dana@example.com"

    def test_placeholder_email_not_replaced_with_another_candidates_email(self, service, db_session):
        owner, _ = service.create_candidate({"first_name": "יוסי", "email": "a@example.com"})
        phone_only, _ = service.create_candidate({"first_name": "דנה", "mobile": "0501234567"})

        merged, created = service.create_candidate({
            "mobile": "0501234567",
            "email": "a@example.com",
            "city": "חיפה",
        })

        assert created is False
        assert merged.id == phone_only.id
        assert merged.has_placeholder_email
        assert merged.city == "חיפה"
        db_session.refresh(owner)
        assert owner.email == "a@example.com"

    def test_candidate_number_not_taken_from_request(self, service):
        candidate, _ = service.create_candidate({"email": "a@example.com", "candidate_number": 7})
        assert candidate.candidate_number == 100


class TestUpdateAndDelete:

    def test_update_candidate(self, service):
        candidate, _ = service.create_candidate({"email": "a@example.com", "city": "חיפה"})
        updated = service.update_candidate(candidate.id, {"city": "ירושלים", "candidate_number": 1})
        assert updated.city == "ירושלים"
        assert updated.candidate_number == 100

    def test_get_unknown_candidate(self, service):
        with pytest.raises(NotFoundError):
            service.get_candidate("missing")

    def test_delete_removes_events_applications_and_file(self, service, db_session, make_job, upload_dir):
        candidate, _ = service.create_candidate({"email": "a@example.com"})
        candidate = service.attach_cv(candidate.id, b"Java developer", "cv.txt", "text/plain")
        job = make_job("Backend developer")
        JobApplicationRepository(db_session).create_application(
            JobApplication(candidate_id=candidate.id, job_id=job.id)
        )
        cv_path = Path(candidate.cv_path)
        candidate_id = candidate.id

        service.delete_candidate(candidate_id)

        assert db_session.get(Candidate, candidate_id) is None
        assert CandidateEventRepository(db_session).get_by_candidate(candidate_id) == []
        assert JobApplicationRepository(db_session).list_applications(candidate_id=candidate_id) == []
        assert not cv_path.exists()


class TestAttachCv:

    def test_text_cached_at_upload(self, service, db_session, upload_dir):
        candidate, _ = service.create_candidate({"email": "a@example.com"})

        updated = service.attach_cv(candidate.id, "Senior Java developer".encode("utf-8"), "קורות חיים.txt")

        assert updated.cv_content == "Senior Java developer"
        stored = Path(updated.cv_path)
        assert stored.exists()
        assert stored.parent == upload_dir / candidate.id
        assert stored.name.endswith("קורות_חיים.txt")
        assert EVENT_CV_UPLOADED in event_types(db_session, candidate.id)

    def test_unreadable_file_still_stored(self, service, upload_dir):
        candidate, _ = service.create_candidate({"email": "a@example.com"})
        updated = service.attach_cv(candidate.id, b"PK\x03\x04 broken", "cv.docx")
        assert updated.cv_path is not None
        assert updated.cv_content is None

    def test_empty_file_rejected(self, service, upload_dir):
        candidate, _ = service.create_candidate({"email": "a@example.com"})
        with pytest.raises(ValueError):
            service.attach_cv(candidate.id, b"", "cv.txt")

    def test_oversized_file_rejected(self, service, upload_dir, monkeypatch):
        from config.settings import settings

        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)
        candidate, _ = service.create_candidate({"email": "a@example.com"})
        with pytest.raises(ValueError):
            service.attach_cv(candidate.id, b"x" * 11, "cv.txt")


class TestBackfill:

    def test_fills_missing_cv_content(self, service, db_session, tmp_path):
        cv_file = tmp_path / "legacy.txt"
        cv_file.write_bytes("Python developer".encode("utf-8"))
        missing_file = tmp_path / "gone.txt"

        with_file, _ = service.create_candidate({"email": "a@example.com"})
        without_file, _ = service.create_candidate({"email": "b@example.com"})
        service.update_candidate(with_file.id, {"cv_path": str(cv_file)})
        service.update_candidate(without_file.id, {"cv_path": str(missing_file)})

        assert service.backfill_cv_content(batch_size=10) == 1
        assert service.get_candidate(with_file.id).cv_content == "Python developer"
        assert service.get_candidate(without_file.id).cv_content is None


class TestExtractCvFields:

    def test_fields_from_text_upload(self):
        content = ("שם: דנה כהן\ndana@example.com\n050-1234567\n" + "filler line\n" * 20).encode("utf-8")
        fields = CandidateService.extract_cv_fields(content, "text/plain", "cv.txt")
        assert fields.first_name == "דנה"
        assert fields.email == "dana@example.com"
        assert fields.mobile == "0501234567"

    def test_garbage_upload_gives_empty_fields(self):
        assert CandidateService.extract_cv_fields(b"%PDF-1.4\x00\x01", "application/pdf").is_empty()
