"""Celery tasks for background job processing."""
import logging

from sqlalchemy.exc import OperationalError

from config.celery_config import celery_app
from utils.errors import MailConnectionError

logger = logging.getLogger(__name__)


@celery_app.task(bind=True)
def poll_inbound_mail_task(self):
    """
    Run one inbound mail poll cycle.

    Scheduled by Celery beat every MAIL_POLL_INTERVAL_SECONDS. A connection
    failure is logged and the cycle is abandoned; the next beat retries.

    Returns:
        Dictionary with the per-outcome message counts
    """
    # Import here to avoid circular imports
    from services.mail_poller import MailboxConfig, MailPoller

    config = MailboxConfig.from_settings()
    if config is None:
        logger.warning("Inbound mail polling is enabled but IMAP is not configured")
        return {"status": "skipped", "reason": "imap_not_configured"}

    try:
        counts = MailPoller(config).poll_once()
    except MailConnectionError as exc:
        logger.error(f"Mail poll cycle aborted: {exc}")
        return {"status": "failed", "error": str(exc)}

    return {"status": "completed", "outcomes": counts}


@celery_app.task(bind=True, max_retries=3)
def backfill_cv_content_task(self, batch_size: int = 100):
    """Cache CV text for candidates whose files were never extracted."""
    try:
        from services.candidate_service import CandidateService
        from utils.database import session_factory

        with session_factory() as session:
            filled = CandidateService(session).backfill_cv_content(batch_size=batch_size)
        return {"status": "completed", "filled": filled}

    # Retryable (transient) errors
    except OperationalError as exc:
        logger.warning(
            f"Retryable error in backfill_cv_content_task (attempt {self.request.retries + 1}): {exc}"
        )
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))
