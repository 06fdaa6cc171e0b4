from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import parse_iso, to_iso
from ..core.enums import SessionStatus


@dataclass(frozen=True)
class AttendanceSession:
    """A time-boxed invitation to mark attendance for one course meeting."""

    session_id: str
    course_id: str
    faculty_id: str
    session_title: str
    created_at: datetime
    expires_at: datetime
    duration: int
    location: str = ""
    is_active: bool = True
    attendance_count: int = 0
    closed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def effective_status(self, now: datetime) -> SessionStatus:
        if not self.is_active:
            return SessionStatus.CLOSED
        if now > self.expires_at:
            return SessionStatus.EXPIRED
        return SessionStatus.OPEN

    def is_open(self, now: datetime) -> bool:
        return self.effective_status(now) is SessionStatus.OPEN

    def with_count(self, attendance_count: int) -> "AttendanceSession":
        return replace(self, attendance_count=int(attendance_count))

    def to_document(self) -> dict:
        doc = {
            "sessionId": self.session_id,
            "courseId": self.course_id,
            "facultyId": self.faculty_id,
            "sessionTitle": self.session_title,
            "location": self.location,
            "createdAt": to_iso(self.created_at),
            "expiresAt": to_iso(self.expires_at),
            "isActive": self.is_active,
            "duration": self.duration,
            "attendanceCount": self.attendance_count,
        }
        if self.closed_at:
            doc["closedAt"] = to_iso(self.closed_at)
        if self.updated_at:
            doc["updatedAt"] = to_iso(self.updated_at)
        return doc

    def to_dict(self, now: datetime) -> dict:
        """API view: `isActive` reports the effective status at `now`, `status` names it."""
        status = self.effective_status(now)
        out = self.to_document()
        out["isActive"] = status is SessionStatus.OPEN
        out["status"] = status.value
        return out

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "AttendanceSession":
        closed_at = data.get("closedAt")
        updated_at = data.get("updatedAt")
        return cls(
            session_id=str(data.get("sessionId") or doc_id),
            course_id=str(data["courseId"]),
            faculty_id=str(data["facultyId"]),
            session_title=data.get("sessionTitle") or "",
            location=data.get("location") or "",
            created_at=parse_iso(data["createdAt"]),
            expires_at=parse_iso(data["expiresAt"]),
            duration=int(data.get("duration") or 0),
            is_active=bool(data.get("isActive", False)),
            attendance_count=int(data.get("attendanceCount") or 0),
            closed_at=parse_iso(closed_at) if closed_at else None,
            updated_at=parse_iso(updated_at) if updated_at else None,
        )
