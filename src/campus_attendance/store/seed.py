from __future__ import annotations

from ..core.constants import COURSES_COLLECTION, ENROLLMENTS_COLLECTION, STUDENTS_COLLECTION
from ..core.enums import EnrollmentStatus
from .base import DocumentStore

DEMO_FACULTY_ID = "faculty-demo"
DEMO_COURSE_ID = "CS101"
DEMO_STUDENTS = (
    ("student-demo-1", "Asha", "Rao", "R001"),
    ("student-demo-2", "Ben", "Okafor", "R002"),
)


def seed_demo_data(store: DocumentStore) -> None:
    """Idempotently write one course owned by the demo faculty, with two enrolled students."""
    store.set(
        COURSES_COLLECTION,
        DEMO_COURSE_ID,
        {"facultyId": DEMO_FACULTY_ID, "courseName": "Introduction to Programming", "courseCode": DEMO_COURSE_ID},
    )
    for student_id, first, last, roll in DEMO_STUDENTS:
        store.set(
            STUDENTS_COLLECTION,
            student_id,
            {
                "firstName": first,
                "lastName": last,
                "email": f"{first.lower()}@example.edu",
                "rollNumber": roll,
            },
        )
        store.set(
            ENROLLMENTS_COLLECTION,
            f"{student_id}_{DEMO_COURSE_ID}",
            {"studentId": student_id, "courseId": DEMO_COURSE_ID, "status": EnrollmentStatus.ACTIVE.value},
        )
