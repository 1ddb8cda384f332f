"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database. The full-text search
query is PostgreSQL-only and is exercised through its short-circuit paths.
"""

import sys
from pathlib import Path

# Add project root to Python path (for direct invocation)
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401  (registers tables on SQLModel.metadata)
from config.settings import settings
from models.job import Job

TEST_API_KEY = "test-secret-key"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.fixture
def make_job(db_session):
    def _make_job(title: str, description: str = "", job_code: str = None) -> Job:
        job = Job(title=title, description=description, job_code=job_code)
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job

    return _make_job


@pytest.fixture
def client(engine, upload_dir, monkeypatch):
    from fastapi.testclient import TestClient

    from api.main import app
    from utils.database import get_db

    monkeypatch.setattr(settings, "API_SECRET_KEY", TEST_API_KEY)

    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"X-API-Key": TEST_API_KEY}) as test_client:
        yield test_client
    app.dependency_overrides.clear()
