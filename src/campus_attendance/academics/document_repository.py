from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import COURSES_COLLECTION, ENROLLMENTS_COLLECTION, STUDENTS_COLLECTION
from ..core.enums import EnrollmentStatus
from ..store.base import DocumentStore, where
from .model import Course, Enrollment, StudentProfile
from .repository import CourseRepository, EnrollmentRepository, StudentRepository


class DocumentCourseRepository(CourseRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, course_id: str) -> Optional[Course]:
        doc = self._store.get(COURSES_COLLECTION, course_id)
        if not doc:
            return None
        return Course(
            course_id=doc.id,
            faculty_id=str(doc.data.get("facultyId") or ""),
            course_name=doc.data.get("courseName") or "",
            course_code=doc.data.get("courseCode") or "",
        )


class DocumentStudentRepository(StudentRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, student_id: str) -> Optional[StudentProfile]:
        doc = self._store.get(STUDENTS_COLLECTION, student_id)
        if not doc:
            return None
        return StudentProfile(
            student_id=doc.id,
            first_name=doc.data.get("firstName") or "",
            last_name=doc.data.get("lastName") or "",
            email=doc.data.get("email"),
            roll_number=doc.data.get("rollNumber"),
        )


class DocumentEnrollmentRepository(EnrollmentRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def has_active_enrollment(self, *, student_id: str, course_id: str) -> bool:
        docs = self._store.query(
            ENROLLMENTS_COLLECTION,
            [
                where("studentId", "==", student_id),
                where("courseId", "==", course_id),
                where("status", "==", EnrollmentStatus.ACTIVE.value),
            ],
        )
        return len(docs) > 0

    def list_active_for_course(self, course_id: str) -> Sequence[Enrollment]:
        docs = self._store.query(
            ENROLLMENTS_COLLECTION,
            [
                where("courseId", "==", course_id),
                where("status", "==", EnrollmentStatus.ACTIVE.value),
            ],
        )
        return [
            Enrollment(
                enrollment_id=d.id,
                student_id=str(d.data["studentId"]),
                course_id=str(d.data["courseId"]),
                status=EnrollmentStatus(d.data["status"]),
            )
            for d in docs
        ]
