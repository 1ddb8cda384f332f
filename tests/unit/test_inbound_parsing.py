"""
Unit tests for inbound email classification and parsing.

Run: pytest tests/unit/test_inbound_parsing.py -v
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from services.inbound_email_service import (
    BODY_PREVIEW_LENGTH,
    is_job_application_email,
    parse_candidate,
)


class TestClassification:

    @pytest.mark.parametrize("subject,body,from_header", [
        ("קורות חיים - מפתח תוכנה", "", "dana@example.com"),
        ("Application for backend role", "", "dana@example.com"),
        ("Hello", "Please find my RESUME attached", "dana@example.com"),
        ("New message", "", "notifications@linkedin.com"),
        ("מועמדות למשרה #123456", "", ""),
    ])
    def test_application_emails(self, subject, body, from_header):
        assert is_job_application_email(subject, body, from_header) is True

    def test_unrelated_email(self):
        assert is_job_application_email("Lunch tomorrow", "see you at noon", "bob@example.com") is False


class TestJobCode:

    def test_hash_prefix(self):
        parsed = parse_candidate("מועמדות למשרה #123456", "", "dana@example.com")
        assert parsed.job_code == "123456"

    def test_hebrew_label(self):
        parsed = parse_candidate("קורות חיים", "קוד משרה: DEV-42", "dana@example.com")
        assert parsed.job_code == "DEV-42"

    def test_english_label(self):
        parsed = parse_candidate("Application", "Job ID: 7781", "dana@example.com")
        assert parsed.job_code == "7781"

    def test_no_code(self):
        parsed = parse_candidate("קורות חיים", "מצורף", "dana@example.com")
        assert parsed.job_code is None


class TestEmail:

    def test_address_in_body_wins(self):
        parsed = parse_candidate("cv", "ניתן לפנות אליי: dana@example.com", "Recruiting <jobs@board.example>")
        assert parsed.email == "dana@example.com"

    def test_bracketed_from_address(self):
        parsed = parse_candidate("cv", "מצורף", "Dana Cohen <dana.cohen@example.com>")
        assert parsed.email == "dana.cohen@example.com"

    def test_bare_from_address(self):
        parsed = parse_candidate("cv", "מצורף", "plain@example.com")
        assert parsed.email == "plain@example.com"

    def test_no_email_anywhere(self):
        parsed = parse_candidate("cv", "מצורף", "")
        assert parsed.email is None


class TestPhone:

    def test_mobile_separators_removed(self):
        parsed = parse_candidate("cv", "טלפון 050-123-4567", "dana@example.com")
        assert parsed.phone == "0501234567"

    def test_landline(self):
        parsed = parse_candidate("cv", "בבית 03 123 4567", "dana@example.com")
        assert parsed.phone == "031234567"

    def test_no_phone(self):
        assert parse_candidate("cv", "", "dana@example.com").phone is None


class TestName:

    def test_labeled_name(self):
        parsed = parse_candidate("קורות חיים", "שם: דנה כהן\ndana@example.com", "")
        assert (parsed.first_name, parsed.last_name) == ("דנה", "כהן")

    def test_greeting(self):
        parsed = parse_candidate("cv", "שלום, \nmy details below", "x@example.com")
        # A greeting without a Hebrew name after it does not produce a name
        assert parsed.first_name is None

    def test_quoted_display_name(self):
        parsed = parse_candidate("resume", "attached", '"Dana Cohen" <dana@example.com>')
        assert (parsed.first_name, parsed.last_name) == ("Dana", "Cohen")

    def test_email_local_part(self):
        parsed = parse_candidate("resume", "attached", "john.smith@example.com")
        assert (parsed.first_name, parsed.last_name) == ("john", "smith")

    def test_single_token_local_part_gives_no_name(self):
        parsed = parse_candidate("resume", "attached", "jsmith@example.com")
        assert parsed.first_name is None
        assert parsed.last_name is None


class TestBodyPreview:

    def test_body_truncated(self):
        body = "א" * (BODY_PREVIEW_LENGTH + 100)
        parsed = parse_candidate("cv", body, "dana@example.com")
        assert len(parsed.original_body) == BODY_PREVIEW_LENGTH

    def test_subject_kept(self):
        assert parse_candidate("קורות חיים", "", "a@b.co").original_subject == "קורות חיים"
