from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EnrollmentStatus


@dataclass(frozen=True)
class Course:
    course_id: str
    faculty_id: str
    course_name: str = ""
    course_code: str = ""

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_id,
            "facultyId": self.faculty_id,
            "courseName": self.course_name,
            "courseCode": self.course_code,
        }


@dataclass(frozen=True)
class StudentProfile:
    student_id: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    roll_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Enrollment:
    enrollment_id: str
    student_id: str
    course_id: str
    status: EnrollmentStatus
