"""Shared fixtures.

The connection settings are required at startup, so they are provided here
before any application module is imported.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["S3_ACCESS_KEY_ID"] = "test-access-key"
os.environ["S3_SECRET_ACCESS_KEY"] = "test-secret-key"
os.environ["S3_ENDPOINT_URL"] = "http://localhost:9000"
os.environ["S3_REGION"] = "us-east-1"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from image_vault.db import get_db  # noqa: E402
from image_vault.dependencies import get_storage_client  # noqa: E402
from image_vault.main import app  # noqa: E402
from image_vault.models import Base  # noqa: E402
from image_vault.repositories import ImageDBRepository  # noqa: E402
from image_vault.services import ImageService  # noqa: E402
from image_vault.storage import InMemoryStorageClient  # noqa: E402


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database session for testing.

    StaticPool keeps one connection so that endpoint code running in the
    threadpool sees the same database as the test.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def repository(db_session):
    """Create an ImageDBRepository bound to the test session."""
    return ImageDBRepository(db_session)


@pytest.fixture
def storage():
    """Create an in-memory storage client with the image bucket."""
    client = InMemoryStorageClient()
    client.ensure_bucket("image")
    return client


@pytest.fixture
def service(repository, storage):
    """Create an ImageService over the test stores."""
    return ImageService(repository=repository, storage=storage)


@pytest.fixture
def client(db_session, storage):
    """Create a test client wired to the test stores.

    The lifespan hook is not run, so no real bucket or table setup happens.
    """
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_storage_client] = lambda: storage

    yield TestClient(app)

    app.dependency_overrides.clear()
