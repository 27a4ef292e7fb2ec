import os

# Configure an isolated in-memory database before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEADLINE_SCHEDULER_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

import taskhub.models  # noqa: F401
from main import app
from taskhub.database import Base, SessionLocal, engine
from taskhub.models import User
from taskhub.services.deadline_notifications import deadline_service
from taskhub.utils.security import create_access_token, hash_password

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    deadline_service.reset()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    def _make_user(emp_id, role="staff", department="Engineering", name=None, email=None):
        user = User(
            emp_id=emp_id,
            name=name or f"User {emp_id}",
            email=email or f"{emp_id.lower()}@example.com",
            hashed_password=hash_password(PASSWORD),
            department=department,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def auth_headers(user):
    token = create_access_token(data={"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def staff(make_user):
    return make_user("E001", name="Alice Tan")


@pytest.fixture
def colleague(make_user):
    return make_user("E002", name="Bob Lim")


@pytest.fixture
def outsider(make_user):
    return make_user("E003", name="Carol Ng", department="Finance")
