# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="missionledger-test-")

from missionledger.api.deps import get_storage
from missionledger.database import get_db
from missionledger.main import app
from missionledger.models import User
from missionledger.models.base import Base
from missionledger.models.enums import UserRole
from missionledger.security import get_password_hash
from missionledger.services.storage_service import LocalStorage

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    """Local storage rooted in a per-test directory."""
    return LocalStorage(tmp_path / "storage", "http://testserver")


@pytest.fixture(scope="function")
def client(db_session, storage):
    """Create a test client with database and storage overrides."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(
    db_session,
    username: str,
    password: str,
    role: UserRole = UserRole.USER,
    is_approved: bool = True,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=get_password_hash(password),
        full_name=username.title(),
        role=role,
        is_approved=is_approved,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session) -> User:
    """Create an approved field user."""
    return make_user(db_session, "testuser", "testpassword123")


@pytest.fixture
def pending_user(db_session) -> User:
    """Create a user still waiting for approval."""
    return make_user(db_session, "newcomer", "newcomerpass123", is_approved=False)


@pytest.fixture
def admin_user(db_session) -> User:
    """Create an admin user."""
    return make_user(db_session, "admin", "adminpassword123", role=UserRole.ADMIN)


@pytest.fixture
def authenticated_client(client, test_user):
    """Create an authenticated test client."""
    response = client.post(
        "/api/v1/auth/login",
        json={"username": "testuser", "password": "testpassword123"},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(client, admin_user):
    """Create an authenticated admin test client."""
    response = client.post(
        "/api/v1/auth/login", json={"username": "admin", "password": "adminpassword123"}
    )
    assert response.status_code == 200
    return client
