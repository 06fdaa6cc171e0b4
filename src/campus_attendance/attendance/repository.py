from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def create_qr_record(self, record: AttendanceRecord) -> bool:
        """Insert-if-absent keyed on (sessionId, studentId); False when already marked."""

        raise NotImplementedError

    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def find_for_student_course_date(
        self, *, student_id: str, course_id: str, on_date: str
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def save_manual_marks(
        self,
        *,
        creates: Sequence[AttendanceRecord],
        updates: Sequence[tuple[str, dict]],
    ) -> None:
        """Write new manual records and corrections in one batch.

        Creates are keyed by `record_id` and raise `DocumentExistsError` when a
        concurrent writer took the key first; nothing is written in that case.
        """

        raise NotImplementedError

    def search(
        self,
        *,
        student_id: Optional[str] = None,
        faculty_id: Optional[str] = None,
        course_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
