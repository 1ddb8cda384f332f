"""
Integration tests for the mail poller, using an in-memory mail source
instead of an IMAP server.

Run: pytest tests/integration/test_mail_poller.py -v
"""

import sys
from email.message import EmailMessage
from pathlib import Path
from types import SimpleNamespace

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest
from sqlmodel import Session, select

from models.candidate import Candidate
from services import mail_poller
from services.inbound_email_service import InboundEmailPipeline, InboundOutcome
from services.mail_poller import (
    MailboxConfig,
    MailPoller,
    html_to_text,
    parse_raw_message,
)
from utils.errors import MailConnectionError

CONFIG = MailboxConfig(host="imap.example.com", user="jobs@example.com", password="secret")


def raw_email(subject: str, body: str, sender: str, html: bool = False) -> bytes:
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = sender
    message["To"] = "jobs@example.com"
    if html:
        message.set_content(body, subtype="html")
    else:
        message.set_content(body)
    return message.as_bytes()


class FakeMailSource:
    """Context manager yielding canned messages, like ImapMailSource."""

    def __init__(self, messages):
        self.messages = messages
        self.closed = False

    def __call__(self, config):
        return self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True

    def fetch_all(self):
        for index, raw in enumerate(self.messages, start=1):
            yield str(index), raw


class UnreachableMailSource:

    def __init__(self, config):
        pass

    def __enter__(self):
        raise MailConnectionError("Could not connect to imap.example.com:993: timed out")

    def __exit__(self, exc_type, exc, tb):
        pass


@pytest.fixture
def make_poller(engine):
    def _make(source) -> MailPoller:
        return MailPoller(CONFIG, session_factory=lambda: Session(engine), source_factory=source)

    return _make


class TestParseRawMessage:

    def test_plain_text_message(self):
        raw = raw_email("קורות חיים", "שם: דנה כהן\nטלפון 050-1234567", "Dana <dana@example.com>")
        message = parse_raw_message(raw)

        assert message.subject == "קורות חיים"
        assert "שם: דנה כהן" in message.body
        assert "dana@example.com" in message.from_header

    def test_html_only_message(self):
        raw = raw_email("cv", "<p>Hello<br>I am &quot;Dana&quot;</p><script>x()</script>", "d@example.com", html=True)
        body = parse_raw_message(raw).body

        assert "Hello" in body
        assert 'I am "Dana"' in body
        assert "<p>" not in body
        assert "x()" not in body

    def test_html_to_text(self):
        assert html_to_text("<div>a</div><p>b</p>c<br/>d") == "a b\nc\nd"


class TestMailboxConfig:

    def test_unconfigured(self):
        source = SimpleNamespace(IMAP_HOST=None, IMAP_USER="u", IMAP_PASSWORD="p")
        assert MailboxConfig.from_settings(source) is None

    def test_configured(self):
        source = SimpleNamespace(
            IMAP_HOST="imap.example.com",
            IMAP_USER="jobs@example.com",
            IMAP_PASSWORD="secret",
            IMAP_PORT=143,
            IMAP_USE_SSL=False,
            IMAP_MAILBOX="Applications",
            IMAP_TIMEOUT_SECONDS=5.0,
        )
        config = MailboxConfig.from_settings(source)
        assert config.port == 143
        assert config.use_ssl is False
        assert config.mailbox == "Applications"


class TestMailPoller:

    def test_poll_once_counts_outcomes(self, make_poller, engine, make_job):
        make_job("Field technician", description="Reference 123456")
        source = FakeMailSource([
            raw_email("מועמדות למשרה #123456", "שם: דנה כהן\n050-1234567", "dana@example.com"),
            raw_email("מועמדות למשרה #123456", "שם: דנה כהן\n050-1234567", "dana@example.com"),
            raw_email("Lunch", "see you", "bob@example.com"),
        ])

        counts = make_poller(source).poll_once()

        assert counts == {"created": 1, "updated": 1, "ignored": 1}
        assert source.closed
        with Session(engine) as session:
            assert len(session.exec(select(Candidate)).all()) == 1

    def test_failing_message_does_not_stop_batch(self, make_poller, engine, monkeypatch):
        original = InboundEmailPipeline.process_message

        def flaky(self, subject, body, from_header):
            if "boom" in subject:
                raise RuntimeError("database went away")
            return original(self, subject, body, from_header)

        monkeypatch.setattr(mail_poller.InboundEmailPipeline, "process_message", flaky)
        source = FakeMailSource([
            raw_email("cv boom", "x", "a@example.com"),
            raw_email("cv", "מצורף", "dana@example.com"),
        ])

        counts = make_poller(source).poll_once()

        assert counts == {"failed": 1, "created": 1}

    def test_unparseable_message(self, make_poller, monkeypatch):
        def broken(raw):
            raise ValueError("bad MIME")

        monkeypatch.setattr(mail_poller, "parse_raw_message", broken)
        assert make_poller(FakeMailSource([])).process_raw("1", b"garbage") == InboundOutcome.FAILED

    def test_connection_failure_aborts_cycle(self, make_poller):
        with pytest.raises(MailConnectionError):
            make_poller(UnreachableMailSource).poll_once()

    def test_empty_mailbox(self, make_poller):
        assert make_poller(FakeMailSource([])).poll_once() == {}


class TestPollTask:

    def test_skipped_without_imap_settings(self, monkeypatch):
        from config.settings import settings
        from services.tasks import poll_inbound_mail_task

        monkeypatch.setattr(settings, "IMAP_HOST", None)
        result = poll_inbound_mail_task()
        assert result["status"] == "skipped"
