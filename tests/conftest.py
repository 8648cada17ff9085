import os

# Settings are read at import time, so they must be in place before the app loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_TOKEN"] = "test-admin-token"
os.environ["CURRENT_SCHOOL_YEAR"] = "2025"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from api.routes.auth import create_access_token
from app import app
from core.database import SessionLocal, engine, get_db
from models.base import Base
from utils import user_manager as user_manager_module
from utils.qr_code_manager import QRCodeManager
from utils.school_manager import SchoolManager
from utils.user_manager import UserManager

TEST_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_schema(monkeypatch):
    monkeypatch.setattr(user_manager_module, "BCRYPT_ROUNDS", 4)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _override_get_db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(role, email=None, school_id=None, first_name="Test", last_name=None):
        return UserManager(db).create_user(
            email=email or f"{role}@example.com",
            password=TEST_PASSWORD,
            role=role,
            first_name=first_name,
            last_name=last_name or role.capitalize(),
            school_id=school_id,
        )

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token({"sub": user.user_id, "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def school(db):
    return SchoolManager(db).create_school("Riverside Academy")


@pytest.fixture
def section(db, school):
    manager = SchoolManager(db)
    level = manager.create_level(school.id, "Grade 3", order_index=3)
    return manager.create_section(school.id, level.id, "Section B")


@pytest.fixture
def teacher(make_user, school, section, db):
    user = make_user("teacher", school_id=school.id, first_name="Maria", last_name="Lopez")
    SchoolManager(db).assign_teacher(section.id, user.user_id)
    return user


@pytest.fixture
def student(make_user, school):
    return make_user("student", school_id=school.id, first_name="Sam", last_name="Lee")


@pytest.fixture
def qr_code(db, teacher, section):
    return QRCodeManager(db).create_code(
        teacher_id=teacher.user_id,
        section_id=section.id,
        title="Grade 3 - Section B",
    )
