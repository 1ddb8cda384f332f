"""Celery configuration and initialization."""
import platform

from celery import Celery
from config.settings import settings

# Initialize Celery app
celery_app = Celery("talent_desk")

celery_config = {
    "broker_url": settings.CELERY_BROKER_URL,
    "result_backend": settings.CELERY_RESULT_BACKEND,
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "timezone": "UTC",
    "enable_utc": True,
    "task_track_started": True,
    "task_time_limit": 5 * 60,  # 5 minutes hard limit
    "task_soft_time_limit": 4 * 60,  # 4 minutes soft limit
    "result_expires": 60 * 60,  # Poll results are not interesting for long
}

# A poll that waited in the queue longer than one interval is dropped
if settings.MAIL_POLLING_ENABLED:
    celery_config["beat_schedule"] = {
        "poll-inbound-mail": {
            "task": "services.tasks.poll_inbound_mail_task",
            "schedule": settings.MAIL_POLL_INTERVAL_SECONDS,
            "options": {"expires": settings.MAIL_POLL_INTERVAL_SECONDS},
        },
    }

# Use threads pool on Windows (prefork doesn't work on Windows)
if platform.system() == "Windows":
    celery_config["worker_pool"] = "threads"
    celery_config["worker_concurrency"] = 4

celery_app.conf.update(celery_config)

# Auto-discover tasks from registered apps
celery_app.autodiscover_tasks(["services"])
