from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .academics.document_repository import (
    DocumentCourseRepository,
    DocumentEnrollmentRepository,
    DocumentStudentRepository,
)
from .attendance.document_repository import DocumentAttendanceRepository
from .attendance.service import AttendanceService
from .auth.identity import TokenVerifier
from .core import constants
from .reports.service import StatisticsService
from .sessions.document_repository import DocumentSessionRepository
from .sessions.service import SessionService
from .store.base import DocumentStore
from .store.memory import InMemoryDocumentStore


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    token_verifier: TokenVerifier

    courses_repo: DocumentCourseRepository
    students_repo: DocumentStudentRepository
    enrollments_repo: DocumentEnrollmentRepository
    sessions_repo: DocumentSessionRepository
    attendance_repo: DocumentAttendanceRepository

    session_service: SessionService
    attendance_service: AttendanceService
    statistics_service: StatisticsService


def build_store(*, backend: str, db_config: Optional[dict] = None, timeout_seconds: int = 10) -> DocumentStore:
    backend = (backend or "memory").lower()
    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "mysql":
        # Imported lazily so the memory backend works without a MySQL driver configured.
        from .store.connection import DatabaseConnection, DBConfig
        from .store.mysql_store import MySQLDocumentStore

        config = DBConfig.from_dict(db_config or {}, timeout_seconds=timeout_seconds)
        return MySQLDocumentStore(DatabaseConnection(config))
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(
    *,
    store: DocumentStore,
    jwt_secret: str,
    jwt_algorithm: str = "HS256",
    default_session_minutes: int = constants.DEFAULT_SESSION_MINUTES,
    min_session_minutes: int = constants.MIN_SESSION_MINUTES,
    max_session_minutes: int = constants.MAX_SESSION_MINUTES,
) -> Container:
    courses_repo = DocumentCourseRepository(store)
    students_repo = DocumentStudentRepository(store)
    enrollments_repo = DocumentEnrollmentRepository(store)
    sessions_repo = DocumentSessionRepository(store)
    attendance_repo = DocumentAttendanceRepository(store)

    session_service = SessionService(
        sessions_repo,
        courses_repo,
        attendance=attendance_repo,
        enrollments=enrollments_repo,
        students=students_repo,
        default_minutes=default_session_minutes,
        min_minutes=min_session_minutes,
        max_minutes=max_session_minutes,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        sessions_repo,
        enrollments_repo,
        courses_repo,
        students=students_repo,
    )
    statistics_service = StatisticsService(attendance_repo, courses_repo)

    return Container(
        store=store,
        token_verifier=TokenVerifier(jwt_secret, algorithm=jwt_algorithm),
        courses_repo=courses_repo,
        students_repo=students_repo,
        enrollments_repo=enrollments_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        session_service=session_service,
        attendance_service=attendance_service,
        statistics_service=statistics_service,
    )
