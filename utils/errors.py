"""
Domain exceptions raised by services and repositories.

Routes translate these into HTTP responses; background jobs log them.
"""

from typing import Any, Optional


class NotFoundError(Exception):
    """Requested entity does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class DuplicateApplicationError(Exception):
    """
    The candidate already applied to this job.

    Carries the existing application so the client can show
    "already applied" details instead of a generic failure.
    """

    def __init__(self, existing: Any):
        super().__init__("Candidate already applied to this job")
        self.existing = existing


class DuplicateCandidateError(Exception):
    """A concurrent insert already stored a candidate with this email."""

    def __init__(self, existing: Any):
        super().__init__(f"Candidate with email {getattr(existing, 'email', '')} already exists")
        self.existing = existing


class CandidateNumberExhaustedError(Exception):
    """Could not allocate a unique candidate number after several attempts."""


class MailConnectionError(Exception):
    """The mail store could not be reached; the whole poll cycle is aborted."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
