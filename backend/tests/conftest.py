"""Pytest fixtures for the KYC service.

Provides reusable test fixtures for:
- SQLite in-memory database session (tables created per test)
- In-memory fakes for storage, session provider and record store
- Seller and admin bearer tokens
- A TestClient wired to the fakes through dependency overrides

Usage:
    def test_my_kyc(client, seller_headers):
        response = client.get("/api/v1/kyc/me", headers=seller_headers)
        assert response.status_code == 200
"""

import os
import sys
from pathlib import Path
from typing import Generator

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("S3_ENDPOINT_URL", "http://localhost:9000")
os.environ.setdefault("S3_ACCESS_KEY_ID", "minioadmin")
os.environ.setdefault("S3_SECRET_ACCESS_KEY", "minioadmin")
os.environ.setdefault("KYC_BUCKET_NAME", "test-kyc-documents")
os.environ.setdefault("LOG_JSON", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base, SellerProfile
from auth.jwt import create_access_token
from database import get_db as database_get_db
from domain.kyc.upload_pipeline import DocumentUploadPipeline
from fixtures.kyc_fakes import FakeStorage, RecordingSleeper


SELLER_ID = "seller-1"
ADMIN_ID = "admin-1"


test_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def seller_profile(db_session: Session) -> SellerProfile:
    profile = SellerProfile(id=SELLER_ID, email="seller@shop.in", is_verified=True, approved=False)
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def seller_token() -> str:
    return create_access_token(user_id=SELLER_ID, role="seller", email="seller@shop.in")


@pytest.fixture
def admin_token() -> str:
    return create_access_token(user_id=ADMIN_ID, role="admin", email="admin@marketplace.in")


@pytest.fixture
def seller_headers(seller_token: str) -> dict:
    return {"Authorization": f"Bearer {seller_token}"}


@pytest.fixture
def admin_headers(admin_token: str) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture(scope="function")
def client(db_session: Session, fake_storage: FakeStorage, sleeper: RecordingSleeper):
    """TestClient backed by SQLite, the fake bucket and a non-sleeping back-off."""
    from main import app
    from kyc.dependencies import get_session_provider, get_storage, get_upload_pipeline

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_get_upload_pipeline(
        session_provider=Depends(get_session_provider),
    ):
        return DocumentUploadPipeline(fake_storage, session_provider, sleep=sleeper)

    app.dependency_overrides[database_get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: fake_storage
    app.dependency_overrides[get_upload_pipeline] = override_get_upload_pipeline

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
