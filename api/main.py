from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes.candidate import router as candidate_router
from api.routes.cv import router as cv_router
from api.routes.job import router as job_router
from api.routes.job_application import router as job_application_router
from config.settings import settings
from utils.logging_config import configure_logging

configure_logging()

DESCRIPTION = """
Recruitment back office API: candidates, jobs, job applications and CV search.

## Authentication

All endpoints (except `/`, `/ping` and `/health`) require an API key via the `X-API-Key` header.

Use the **Authorize** button above to set your API key for testing.

## Quick Start

1. **Prefill a candidate form** → `POST /cv/extract` with a CV file
2. **Create the candidate** → `POST /candidates` (an existing candidate with the same phone, email or ID is reused)
3. **Attach the CV** → `POST /candidates/{id}/cv`
4. **Search** → `POST /cv/search` with keywords, or `GET /cv/search?q=...` for ranked full-text search

## CV Search Modes

| Mode | Description |
|------|-------------|
| `POST /cv/search` | Scans every candidate; supports excluded keywords |
| `GET /cv/search` | PostgreSQL full-text search over cached CV text, ranked and paginated |

Candidates also arrive from the inbound mailbox, polled in the background by Celery beat.
"""

tags_metadata = [
    {
        "name": "Health",
        "description": "Health check endpoints. No authentication required.",
    },
    {
        "name": "Candidates",
        "description": "Create, update and browse candidates. Creation deduplicates by phone, email and national ID.",
    },
    {
        "name": "CV",
        "description": "Extract form fields from CV files and search CV content.",
    },
    {
        "name": "Jobs",
        "description": "Manage job postings.",
    },
    {
        "name": "Job Applications",
        "description": "Link candidates to jobs. One application per candidate and job.",
    },
]

app = FastAPI(
    title="Talent Desk API",
    description=DESCRIPTION,
    version="1.0.0",
    openapi_tags=tags_metadata,
)

# Configure CORS
ALLOWED_ORIGINS = settings.ALLOWED_ORIGINS.split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information and documentation links"""
    return {
        "message": "Welcome to Talent Desk API",
        "version": "1.0.0",
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "authentication": {
            "type": "API Key",
            "header": "X-API-Key",
            "note": "Required for all endpoints except /, /ping and /health"
        },
        "endpoints": {
            "health": "/health",
            "ping": "/ping",
            "candidates": "/candidates",
            "cv": "/cv",
            "jobs": "/jobs",
            "job_applications": "/job-applications"
        }
    }


# Health check endpoints (public - no authentication required)
@app.get("/ping", tags=["Health"])
def ping():
    """Simple ping endpoint to check if API is responding. No authentication required."""
    return {"message": "pong"}


@app.get("/health", tags=["Health"])
def health():
    """Health check endpoint with basic status information. No authentication required."""
    return {
        "status": "healthy",
        "service": "Talent Desk API",
        "version": "1.0.0"
    }


# Register routers
app.include_router(candidate_router)
app.include_router(cv_router)
app.include_router(job_router)
app.include_router(job_application_router)
