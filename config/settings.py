from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from dotenv import load_dotenv

# Load .env file into os.environ BEFORE pydantic reads it, so Celery and
# Alembic see the same variables as the API process.
load_dotenv()


class Settings(BaseSettings):
    # Database
    DATABASE_URL: Optional[str] = None

    # API server
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8000
    API_SECRET_KEY: Optional[str] = None
    ALLOWED_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"

    # CV uploads and text extraction
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB, same cap as the upload form
    EXTRACTION_TIMEOUT_SECONDS: float = 20.0
    MAX_WORKER_THREADS: int = 4  # Shared pool for blocking document extraction
    PDFTOTEXT_BINARY: str = "pdftotext"

    # CV search
    TEXT_SEARCH_CONFIG: str = "english"  # Must match the GIN index expression
    NAIVE_SEARCH_MAX_RESULTS: int = 500

    # Inbound mailbox (IMAP). Polling stays off until host and user are set.
    IMAP_HOST: Optional[str] = None
    IMAP_PORT: int = 993
    IMAP_USER: Optional[str] = None
    IMAP_PASSWORD: Optional[str] = None
    IMAP_USE_SSL: bool = True
    IMAP_MAILBOX: str = "INBOX"
    IMAP_TIMEOUT_SECONDS: float = 30.0
    MAIL_POLL_INTERVAL_SECONDS: float = 20.0
    MAIL_POLLING_ENABLED: bool = False

    # Celery (beat drives the mail poller)
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",  # ignore unknown env vars instead of raising errors
    )


settings = Settings()
