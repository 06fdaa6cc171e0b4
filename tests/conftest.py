from __future__ import annotations

from datetime import datetime, timezone

import pytest

from campus_attendance.auth.identity import Principal
from campus_attendance.container import Container, build_container
from campus_attendance.core.enums import Role
from campus_attendance.store.memory import InMemoryDocumentStore

JWT_SECRET = "test-jwt-secret-for-the-suite-only-0001"


def seed() -> dict:
    return {
        "courses": {
            "CS101": {"facultyId": "fac-1", "courseName": "Programming I", "courseCode": "CS101"},
            "MA201": {"facultyId": "fac-2", "courseName": "Linear Algebra", "courseCode": "MA201"},
        },
        "students": {
            "stu-1": {"firstName": "Asha", "lastName": "Rao", "email": "asha@example.edu", "rollNumber": "R1"},
            "stu-2": {"firstName": "Ben", "lastName": "Okafor", "email": "ben@example.edu", "rollNumber": "R2"},
            "stu-3": {"firstName": "Chen", "lastName": "Li", "email": "chen@example.edu", "rollNumber": "R3"},
        },
        "enrollments": {
            "e1": {"studentId": "stu-1", "courseId": "CS101", "status": "active"},
            "e2": {"studentId": "stu-2", "courseId": "CS101", "status": "active"},
            "e3": {"studentId": "stu-3", "courseId": "CS101", "status": "inactive"},
            "e4": {"studentId": "stu-1", "courseId": "MA201", "status": "active"},
        },
    }


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(seed())


@pytest.fixture
def container(store) -> Container:
    return build_container(store=store, jwt_secret=JWT_SECRET)


@pytest.fixture
def faculty() -> Principal:
    return Principal(user_id="fac-1", role=Role.FACULTY)


@pytest.fixture
def other_faculty() -> Principal:
    return Principal(user_id="fac-2", role=Role.FACULTY)


@pytest.fixture
def admin() -> Principal:
    return Principal(user_id="adm-1", role=Role.ADMIN)


@pytest.fixture
def student() -> Principal:
    return Principal(user_id="stu-1", role=Role.STUDENT)


@pytest.fixture
def student2() -> Principal:
    return Principal(user_id="stu-2", role=Role.STUDENT)
