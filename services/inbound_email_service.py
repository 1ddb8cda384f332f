"""
Inbound Email Candidate Pipeline.

Turns job-application emails into candidate profiles:
1. classify the message against a job-application vocabulary
2. parse name / email / phone / job reference code
3. resolve identity (phone + email) and merge, or create a new profile
4. link the candidate to the job quoted in the message, if one matches

The pipeline is stateless and handles one message at a time. Failures of a
single message are caught by the caller (the mail poller), so one bad email
never aborts a batch.
"""

import logging
import re
from enum import Enum
from typing import Optional, Tuple

from sqlmodel import Session

from models.candidate import Candidate, UNSPECIFIED_CITY
from models.extracted_fields import InboundParsedCandidate
from models.job_application import ApplicationStatus, JobApplication
from repositories import (
    CandidateRepository,
    CandidateEventRepository,
    JobRepository,
    JobApplicationRepository,
)
from services.identity_resolver import IdentityResolver
from utils.errors import DuplicateApplicationError, DuplicateCandidateError

logger = logging.getLogger(__name__)

BODY_PREVIEW_LENGTH = 500

PLACEHOLDER_FIRST_NAME = "מועמד"
PLACEHOLDER_LAST_NAME = "חדש"
INBOUND_PROFESSION = "מועמדות ממייל"
INBOUND_SOURCE = "מייל נכנס"
EVENT_EMAIL_RECEIVED = "email_received"

APPLICATION_KEYWORDS = [
    "קורות חיים", "קןרות חיים", "קוח", "cv", "resume", "מועמדות", "השתלמתי", "התמחות",
    "משרה", "job", "application", "apply", "candidate", "נשלח מאתר",
    "drushim", "indeed", "linkedin", "jobmaster", "alljobs", "משרת שטח", "משרת חשמל",
]

JOB_CODE_PATTERN = re.compile(r"(?:קוד משרה|Job ID|משרה|#)\s*:?\s*([A-Z0-9-]+)", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(?:05[0-9]|02|03|04|08|09)[-\s]?[0-9]{3}[-\s]?[0-9]{4}")
NAME_PATTERN = re.compile(r"(?:שם|שלום|היי)\s*:?\s*([א-ת\s]{2,30})", re.IGNORECASE)
BRACKETED_ADDRESS = re.compile(r"<(.+)>")
QUOTED_DISPLAY_NAME = re.compile(r'"([^"]+)"')


class InboundOutcome(str, Enum):
    IGNORED = "ignored"
    SKIPPED_NO_EMAIL = "skipped_no_email"
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


def is_job_application_email(subject: str, body: str, from_header: str) -> bool:
    text = f"{subject} {body} {from_header}".lower()
    return any(keyword in text for keyword in APPLICATION_KEYWORDS)


def _split_name(value: str) -> Tuple[str, str]:
    parts = value.strip().split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def parse_candidate(subject: str, body: str, from_header: str) -> InboundParsedCandidate:
    """
    Parse candidate details from one email.

    - job code: label-prefixed token (`קוד משרה`, `Job ID`, `משרה`, `#`)
    - email: first address in subject/body, else `<addr>` in From, else From itself
    - phone: Israeli phone shape, separators removed
    - name: `שם:` / greeting prefix, else quoted From display name,
      else the email local part split on '.' / '_'
    """
    full_text = f"{subject}\n{body}"

    job_code_match = JOB_CODE_PATTERN.search(full_text)
    job_code = job_code_match.group(1) if job_code_match else None

    email_match = EMAIL_PATTERN.search(full_text)
    if email_match:
        email = email_match.group(0)
    else:
        bracketed = BRACKETED_ADDRESS.search(from_header)
        email = bracketed.group(1) if bracketed else from_header
    email = email.strip()

    phone_match = PHONE_PATTERN.search(full_text)
    phone = re.sub(r"[-\s]", "", phone_match.group(0)) if phone_match else None

    first_name, last_name = "", ""
    name_match = NAME_PATTERN.search(full_text)
    if name_match:
        first_name, last_name = _split_name(name_match.group(1))
    else:
        display = QUOTED_DISPLAY_NAME.search(from_header)
        sender_name = display.group(1) if display else ""
        if sender_name and sender_name != email:
            first_name, last_name = _split_name(sender_name)
        elif email:
            local_parts = [p for p in re.split(r"[._]", email.split("@")[0]) if len(p) > 1]
            if len(local_parts) >= 2:
                first_name, last_name = local_parts[0], " ".join(local_parts[1:])

    return InboundParsedCandidate(
        first_name=first_name or None,
        last_name=last_name or None,
        email=email or None,
        phone=phone,
        job_code=job_code,
        original_subject=subject,
        original_body=body[:BODY_PREVIEW_LENGTH],
    )


def _email_block(header: str, parsed: InboundParsedCandidate) -> str:
    return f"--- {header} ---\nנושא: {parsed.original_subject}\nתוכן:\n{parsed.original_body}"


class InboundEmailPipeline:
    """Process inbound emails into candidates and job applications."""

    def __init__(self, db_session: Session):
        self.candidate_repo = CandidateRepository(db_session)
        self.event_repo = CandidateEventRepository(db_session)
        self.job_repo = JobRepository(db_session)
        self.application_repo = JobApplicationRepository(db_session)
        self.resolver = IdentityResolver(db_session, self.candidate_repo)

    def process_message(self, subject: Optional[str], body: Optional[str], from_header: Optional[str]) -> InboundOutcome:
        """
        Run the pipeline for one email.

        Store errors propagate; the caller decides to log and continue.
        """
        subject, body, from_header = subject or "", body or "", from_header or ""

        if not is_job_application_email(subject, body, from_header):
            logger.info(f"Not a job application email: {subject!r}")
            return InboundOutcome.IGNORED

        parsed = parse_candidate(subject, body, from_header)
        if not parsed.email:
            logger.warning(f"No candidate email found, skipping message: {subject!r}")
            return InboundOutcome.SKIPPED_NO_EMAIL

        candidate, created = self._create_or_merge(parsed)
        self.event_repo.add_event(
            candidate.id,
            EVENT_EMAIL_RECEIVED,
            description=f"Email received: {subject}",
            metadata={"from": from_header, "job_code": parsed.job_code},
        )

        if parsed.job_code:
            self._link_job(candidate, parsed)
        else:
            logger.info(f"No job code in message; candidate #{candidate.candidate_number} stored without application")

        return InboundOutcome.CREATED if created else InboundOutcome.UPDATED

    def _create_or_merge(self, parsed: InboundParsedCandidate) -> Tuple[Candidate, bool]:
        existing = self.resolver.find_existing(mobile=parsed.phone, email=parsed.email)
        if existing:
            return self._merge(existing, parsed), False

        candidate = Candidate(
            first_name=parsed.first_name or PLACEHOLDER_FIRST_NAME,
            last_name=parsed.last_name or PLACEHOLDER_LAST_NAME,
            email=parsed.email,
            mobile=parsed.phone,
            city=UNSPECIFIED_CITY,
            profession=INBOUND_PROFESSION if parsed.job_code else None,
            notes=_email_block("מייל מקורי", parsed),
            recruitment_source=INBOUND_SOURCE,
        )
        try:
            candidate = self.candidate_repo.create_candidate(candidate)
        except DuplicateCandidateError as e:
            logger.info(f"Candidate {parsed.email} was created concurrently; merging instead")
            return self._merge(e.existing, parsed), False

        logger.info(
            f"Created candidate #{candidate.candidate_number} from email: "
            f"{candidate.first_name} {candidate.last_name} <{candidate.email}>"
        )
        return candidate, True

    def _merge(self, existing: Candidate, parsed: InboundParsedCandidate) -> Candidate:
        """Fill missing name/mobile and append the email to the notes. The stored email is never changed."""
        if parsed.first_name and existing.first_name in (None, "", PLACEHOLDER_FIRST_NAME):
            existing.first_name = parsed.first_name
        if parsed.last_name and existing.last_name in (None, "", PLACEHOLDER_LAST_NAME):
            existing.last_name = parsed.last_name
        if parsed.phone and not existing.mobile:
            existing.mobile = parsed.phone

        existing.notes = f"{existing.notes or ''}\n\n{_email_block('מייל חדש', parsed)}".strip()
        existing = self.candidate_repo.update(existing)
        logger.info(f"Candidate with email {parsed.email} already exists; updated #{existing.candidate_number}")
        return existing

    def _link_job(self, candidate: Candidate, parsed: InboundParsedCandidate) -> Optional[JobApplication]:
        job = self.job_repo.find_by_reference_code(parsed.job_code)
        if not job:
            logger.info(f"No job matches code {parsed.job_code}")
            return None

        application = JobApplication(
            candidate_id=candidate.id,
            job_id=job.id,
            status=ApplicationStatus.SUBMITTED.value,
            notes=(
                "מועמדות אוטומטית ממייל נכנס\n"
                f"קוד משרה: {parsed.job_code}\n"
                f"נושא המייל: {parsed.original_subject}"
            ),
        )
        try:
            application = self.application_repo.create_application(application)
        except DuplicateApplicationError as e:
            logger.info(f"Candidate #{candidate.candidate_number} already applied to job {job.title}")
            return e.existing

        logger.info(f"Linked candidate #{candidate.candidate_number} to job {job.title}")
        return application
