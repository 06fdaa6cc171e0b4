from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceSession


class SessionRepository(Protocol):
    def create(self, session: AttendanceSession) -> None:
        raise NotImplementedError

    def get_by_id(self, session_id: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list(
        self,
        *,
        faculty_id: Optional[str] = None,
        course_id: Optional[str] = None,
    ) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def deactivate(self, session_id: str, *, now: datetime, closed: bool = False) -> bool:
        """Persist isActive=false; `closed` also stamps closedAt for explicit closes."""

        raise NotImplementedError

    def increment_attendance(self, session_id: str, *, now: datetime) -> bool:
        raise NotImplementedError

    def repair_attendance_count(self, session_id: str, *, expected: int, count: int, now: datetime) -> bool:
        """Overwrite the counter only if it still holds `expected`; False when a scan moved it first."""

        raise NotImplementedError

    def delete_with_records(self, session_id: str) -> int:
        """Delete the session and all its attendance records in one batch; return records removed."""

        raise NotImplementedError
