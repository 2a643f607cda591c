"""
Shared fixtures: a throwaway sqlite database, a TestClient wired to it and
small factories for the rows most tests need.
"""
import os
import tempfile
from datetime import time

import pytest
from faker import Faker

_tmp_dir = tempfile.mkdtemp(prefix="campus_portal_tests_")

# must be set before campus_portal.config is imported
os.environ["DATABASE_URL"] = f"sqlite:///{_tmp_dir}/test.db"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["LOG_DIR"] = os.path.join(_tmp_dir, "logs")

from fastapi.testclient import TestClient

from campus_portal.main import app
from campus_portal.database import Base, SessionLocal, engine, get_db
from campus_portal.utils.auth import create_access_token
from campus_portal.utils.hashing import hash_password

from campus_portal.models.course import Course
from campus_portal.models.enums import Day, UserRole
from campus_portal.models.room import Room
from campus_portal.models.section import Section
from campus_portal.models.student_schedule import StudentSchedule
from campus_portal.models.user import User

fake = Faker()

PASSWORD = "password123"
# hashing is slow, do it once
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make(role=UserRole.STUDENT, **kwargs):
        user = User(
            name=kwargs.pop("name", fake.name()),
            email=kwargs.pop("email", fake.unique.email()).lower(),
            password_hash=PASSWORD_HASH,
            role=role,
            **kwargs,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": user.email, "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


@pytest.fixture
def faculty(make_user):
    return make_user(UserRole.FACULTY)


@pytest.fixture
def student(make_user):
    return make_user(UserRole.STUDENT)


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def faculty_headers(faculty, auth_headers):
    return auth_headers(faculty)


@pytest.fixture
def student_headers(student, auth_headers):
    return auth_headers(student)


@pytest.fixture
def make_room(db_session):
    def _make(no=None, max_capacity=30):
        room = Room(no=no or f"R-{fake.unique.random_int(100, 999)}", max_capacity=max_capacity)
        db_session.add(room)
        db_session.commit()
        db_session.refresh(room)
        return room
    return _make


@pytest.fixture
def make_course(db_session):
    def _make(name="Math", code=None):
        course = Course(name=name, code=code or f"C-{fake.unique.random_int(100, 999)}")
        db_session.add(course)
        db_session.commit()
        db_session.refresh(course)
        return course
    return _make


@pytest.fixture
def make_section(db_session, make_room, make_course):
    def _make(faculty, room=None, course=None, day=Day.MONDAY, start=time(9, 0), end=time(10, 45), code="A"):
        room = room or make_room()
        course = course or make_course()
        section = Section(
            name=f"Section {code}",
            code=code,
            course_id=course.id,
            room_id=room.id,
            faculty_id=faculty.id,
            day=day,
            start_time=start,
            end_time=end,
        )
        db_session.add(section)
        db_session.commit()
        db_session.refresh(section)
        return section
    return _make


@pytest.fixture
def enroll(db_session):
    def _enroll(student, section):
        row = StudentSchedule(student_id=student.id, section_id=section.id)
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row
    return _enroll


@pytest.fixture(autouse=True)
def _reset_faker():
    # every test starts on an empty database
    fake.unique.clear()
    yield


@pytest.fixture
def password():
    return PASSWORD
