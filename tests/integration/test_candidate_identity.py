"""
Integration tests for candidate numbering and identity resolution.

Uses the in-memory SQLite database from conftest.py.
Run: pytest tests/integration/test_candidate_identity.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from models.candidate import Candidate, PLACEHOLDER_EMAIL_DOMAIN
from repositories.candidate_repository import CandidateRepository, FIRST_CANDIDATE_NUMBER
from services.identity_resolver import IdentityResolver
from utils.errors import CandidateNumberExhaustedError, DuplicateCandidateError


def new_candidate(**kwargs) -> Candidate:
    kwargs.setdefault("first_name", "דנה")
    kwargs.setdefault("last_name", "כהן")
    return Candidate(**kwargs)


class TestCandidateNumbering:

    def test_numbers_start_at_100_and_increase(self, db_session):
        repo = CandidateRepository(db_session)
        numbers = [
            repo.create_candidate(new_candidate(email=f"c{i}@example.com")).candidate_number
            for i in range(3)
        ]
        assert numbers == [FIRST_CANDIDATE_NUMBER, FIRST_CANDIDATE_NUMBER + 1, FIRST_CANDIDATE_NUMBER + 2]

    def test_retries_when_number_taken(self, db_session, monkeypatch):
        repo = CandidateRepository(db_session)
        repo.create_candidate(new_candidate(email="first@example.com"))

        # Simulate a concurrent writer: the first read returns a number already in use
        proposed = iter([100, 101])
        monkeypatch.setattr(repo, "next_candidate_number", lambda: next(proposed))

        second = repo.create_candidate(new_candidate(email="second@example.com"))
        assert second.candidate_number == 101

    def test_gives_up_after_max_attempts(self, db_session, monkeypatch):
        repo = CandidateRepository(db_session)
        repo.create_candidate(new_candidate(email="first@example.com"))
        monkeypatch.setattr(repo, "next_candidate_number", lambda: 100)

        with pytest.raises(CandidateNumberExhaustedError):
            repo.create_candidate(new_candidate(email="second@example.com"), max_attempts=3)

    def test_duplicate_email_reports_existing(self, db_session):
        repo = CandidateRepository(db_session)
        first = repo.create_candidate(new_candidate(email="dana@example.com"))

        with pytest.raises(DuplicateCandidateError) as exc_info:
            repo.create_candidate(new_candidate(email="DANA@example.com"))
        assert exc_info.value.existing.id == first.id

    def test_missing_email_gets_placeholder(self, db_session):
        candidate = CandidateRepository(db_session).create_candidate(new_candidate(email=""))
        assert candidate.email.endswith("@" + PLACEHOLDER_EMAIL_DOMAIN)
        assert candidate.has_placeholder_email

    def test_mobile_normalized_on_insert(self, db_session):
        candidate = CandidateRepository(db_session).create_candidate(
            new_candidate(email="m@example.com", mobile="+972-50-1234567")
        )
        assert candidate.mobile == "0501234567"


class TestIdentityResolver:

    def test_found_by_phone_in_any_format(self, db_session):
        repo = CandidateRepository(db_session)
        stored = repo.create_candidate(new_candidate(email="dana@example.com", mobile="050-1234567"))
        resolver = IdentityResolver(db_session)

        assert resolver.find_existing(mobile="+972501234567").id == stored.id
        assert resolver.find_existing(mobile="(050) 123 4567").id == stored.id

    def test_unnormalized_stored_phone_matches(self, db_session):
        # Rows written before normalization keep their separators
        legacy = new_candidate(candidate_number=100, email="legacy@example.com", mobile="050-123-4567")
        db_session.add(legacy)
        db_session.commit()

        assert IdentityResolver(db_session).find_existing(mobile="0501234567").id == legacy.id

    def test_found_by_email_case_insensitive(self, db_session):
        stored = CandidateRepository(db_session).create_candidate(new_candidate(email="dana@example.com"))
        assert IdentityResolver(db_session).find_existing(email="Dana@Example.com").id == stored.id

    def test_found_by_national_id(self, db_session):
        stored = CandidateRepository(db_session).create_candidate(
            new_candidate(email="id@example.com", national_id="123456782")
        )
        assert IdentityResolver(db_session).find_existing(national_id="123456782").id == stored.id

    def test_placeholder_email_never_matches(self, db_session):
        stored = CandidateRepository(db_session).create_candidate(new_candidate(email=""))
        assert IdentityResolver(db_session).find_existing(email=stored.email) is None

    def test_any_key_is_enough(self, db_session):
        stored = CandidateRepository(db_session).create_candidate(
            new_candidate(email="dana@example.com", mobile="0501234567")
        )
        found = IdentityResolver(db_session).find_existing(mobile="0501234567", email="other@example.com")
        assert found.id == stored.id

    def test_most_recent_match_wins(self, db_session):
        repo = CandidateRepository(db_session)
        repo.create_candidate(new_candidate(email="old@example.com", mobile="0501234567"))
        newer = repo.create_candidate(new_candidate(email="new@example.com", mobile="0501234567"))

        assert IdentityResolver(db_session).find_existing(mobile="050-1234567").id == newer.id

    def test_no_keys(self, db_session):
        CandidateRepository(db_session).create_candidate(new_candidate(email="dana@example.com"))
        assert IdentityResolver(db_session).find_existing() is None
        assert IdentityResolver(db_session).find_existing(mobile="", email="  ") is None

    def test_no_match(self, db_session):
        CandidateRepository(db_session).create_candidate(new_candidate(email="dana@example.com"))
        assert IdentityResolver(db_session).find_existing(mobile="0529999999") is None
