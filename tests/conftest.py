"""Shared fixtures: in-memory MongoDB, API client and one account per role."""

import os

# Must be set before marksheet.core.config is imported
os.environ.setdefault("MARKSHEET_JWT_SECRET", "test-secret")
os.environ.setdefault("MARKSHEET_BCRYPT_ROUNDS", "4")
os.environ.setdefault("MARKSHEET_DB_NAME", "marksheet_test")

import mongomock
import pytest
from fastapi.testclient import TestClient

from marksheet.core.database import ensure_indexes, get_database
from marksheet.main import app
from tests.factories import auth_header, make_student, make_user


@pytest.fixture
def db():
    database = mongomock.MongoClient()["marksheet_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    # Not used as a context manager, so the lifespan never reaches a real server
    app.dependency_overrides[get_database] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    return make_user(db, "Admin User", "admin@school.com", "admin")


@pytest.fixture
def teacher(db):
    return make_user(db, "John Smith", "john.smith@school.com", "teacher")


@pytest.fixture
def student_user(db):
    return make_user(db, "Alice Brown", "alice.brown@student.com", "student")


@pytest.fixture
def student(db, student_user):
    """Student record linked by email to student_user."""
    return make_student(db, "Alice Brown", "alice.brown@student.com", "STU001")


@pytest.fixture
def other_student(db):
    return make_student(db, "Bob Wilson", "bob.wilson@student.com", "STU002")


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin)


@pytest.fixture
def teacher_headers(teacher):
    return auth_header(teacher)


@pytest.fixture
def student_headers(student_user):
    return auth_header(student_user)
