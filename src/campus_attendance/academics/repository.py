from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course, Enrollment, StudentProfile


class CourseRepository(Protocol):
    def get_by_id(self, course_id: str) -> Optional[Course]:
        raise NotImplementedError


class StudentRepository(Protocol):
    def get_by_id(self, student_id: str) -> Optional[StudentProfile]:
        raise NotImplementedError


class EnrollmentRepository(Protocol):
    def has_active_enrollment(self, *, student_id: str, course_id: str) -> bool:
        raise NotImplementedError

    def list_active_for_course(self, course_id: str) -> Sequence[Enrollment]:
        raise NotImplementedError
