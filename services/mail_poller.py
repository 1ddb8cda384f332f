"""
Inbound mail polling driver.

Connects to the mailbox over IMAP, fetches every message (fetching with
RFC822 marks it as read), and runs each one through the inbound email
pipeline in its own database session.

A connection failure aborts the whole cycle with MailConnectionError; the
next scheduled cycle retries. A failure in one message is logged and the
cycle moves on.
"""

import email
import html
import imaplib
import logging
import re
from collections import Counter
from dataclasses import dataclass
from email import policy
from email.message import EmailMessage
from typing import Callable, Dict, Iterator, Optional, Tuple

from sqlmodel import Session

from config.settings import settings
from services.inbound_email_service import InboundEmailPipeline, InboundOutcome
from utils.database import session_factory as default_session_factory
from utils.errors import MailConnectionError

logger = logging.getLogger(__name__)

_HTML_TAG = re.compile(r"<[^>]+>")
_HTML_DROP = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_BLANK_RUNS = re.compile(r"[ \t]+")


@dataclass(frozen=True)
class MailboxConfig:
    """Explicit mailbox configuration; there are no built-in credentials."""

    host: str
    user: str
    password: str
    port: int = 993
    use_ssl: bool = True
    mailbox: str = "INBOX"
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, source=settings) -> Optional["MailboxConfig"]:
        """Build from application settings, or None when IMAP is not configured."""
        if not (source.IMAP_HOST and source.IMAP_USER and source.IMAP_PASSWORD):
            return None
        return cls(
            host=source.IMAP_HOST,
            user=source.IMAP_USER,
            password=source.IMAP_PASSWORD,
            port=source.IMAP_PORT,
            use_ssl=source.IMAP_USE_SSL,
            mailbox=source.IMAP_MAILBOX,
            timeout=source.IMAP_TIMEOUT_SECONDS,
        )


@dataclass
class InboundMessage:
    subject: str
    body: str
    from_header: str


def html_to_text(markup: str) -> str:
    text = _HTML_DROP.sub(" ", markup)
    text = re.sub(r"<br\s*/?>|</p>", "\n", text, flags=re.IGNORECASE)
    text = html.unescape(_HTML_TAG.sub(" ", text))
    return "\n".join(_BLANK_RUNS.sub(" ", line).strip() for line in text.splitlines() if line.strip())


def _message_body(message: EmailMessage) -> str:
    """Plain-text body, else the HTML body with markup stripped."""
    part = message.get_body(preferencelist=("plain",))
    if part is not None:
        return part.get_content()
    part = message.get_body(preferencelist=("html",))
    if part is not None:
        return html_to_text(part.get_content())
    return ""


def parse_raw_message(raw: bytes) -> InboundMessage:
    message = email.message_from_bytes(raw, policy=policy.default)
    return InboundMessage(
        subject=str(message.get("Subject", "") or ""),
        body=_message_body(message),
        from_header=str(message.get("From", "") or ""),
    )


class ImapMailSource:
    """
    IMAP mailbox as a context manager.

    Usage:
        with ImapMailSource(config) as source:
            for message_id, raw in source.fetch_all():
                ...
    """

    def __init__(self, config: MailboxConfig):
        self.config = config
        self._connection: Optional[imaplib.IMAP4] = None

    def __enter__(self) -> "ImapMailSource":
        config = self.config
        try:
            if config.use_ssl:
                connection = imaplib.IMAP4_SSL(config.host, config.port, timeout=config.timeout)
            else:
                connection = imaplib.IMAP4(config.host, config.port, timeout=config.timeout)
            connection.login(config.user, config.password)
            status, _ = connection.select(config.mailbox)
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailConnectionError(f"Could not connect to {config.host}:{config.port}: {e}", cause=e)

        if status != "OK":
            connection.logout()
            raise MailConnectionError(f"Could not open mailbox {config.mailbox}")

        self._connection = connection
        logger.info(f"Connected to IMAP {config.host}, mailbox {config.mailbox}")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
            self._connection.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.debug(f"Error while closing IMAP connection: {e}")
        finally:
            self._connection = None

    def fetch_all(self) -> Iterator[Tuple[str, bytes]]:
        """Yield (message id, raw RFC822 bytes) for every message in the mailbox."""
        try:
            status, data = self._connection.search(None, "ALL")
            if status != "OK":
                raise MailConnectionError("IMAP search failed")
            message_ids = data[0].split()
            logger.info(f"Found {len(message_ids)} messages to process")

            for message_id in message_ids:
                status, msg_data = self._connection.fetch(message_id, "(RFC822)")
                if status != "OK" or not msg_data or not isinstance(msg_data[0], tuple):
                    logger.warning(f"Could not fetch message {message_id!r}")
                    continue
                yield message_id.decode(), msg_data[0][1]
        except (imaplib.IMAP4.abort, OSError) as e:
            raise MailConnectionError(f"IMAP connection lost: {e}", cause=e)


class MailPoller:
    """Run one inbound mail cycle at a time."""

    def __init__(
        self,
        config: MailboxConfig,
        session_factory: Callable[[], Session] = default_session_factory,
        source_factory: Callable[[MailboxConfig], ImapMailSource] = ImapMailSource,
    ):
        self.config = config
        self.session_factory = session_factory
        self.source_factory = source_factory

    def poll_once(self) -> Dict[str, int]:
        """
        Fetch and process every message in the mailbox.

        Returns:
            Count of messages per InboundOutcome value

        Raises:
            MailConnectionError: The mailbox could not be reached
        """
        counts: Counter = Counter()
        with self.source_factory(self.config) as source:
            for message_id, raw in source.fetch_all():
                counts[self.process_raw(message_id, raw).value] += 1

        logger.info(f"Mail poll cycle finished: {dict(counts)}")
        return dict(counts)

    def process_raw(self, message_id: str, raw: bytes) -> InboundOutcome:
        """Process one raw message; any failure is logged and reported as FAILED."""
        try:
            message = parse_raw_message(raw)
        except Exception as e:
            logger.error(f"Could not parse message {message_id}: {e}", exc_info=True)
            return InboundOutcome.FAILED

        logger.info(f"Processing message {message_id} from {message.from_header}: {message.subject!r}")
        with self.session_factory() as session:
            try:
                return InboundEmailPipeline(session).process_message(
                    message.subject, message.body, message.from_header
                )
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to process message {message_id}: {e}", exc_info=True)
                return InboundOutcome.FAILED
