from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import parse_iso, to_iso
from ..core.enums import AttendanceStatus, MarkedVia


def qr_record_key(session_id: str, student_id: str) -> str:
    """Document key of a QR-marked record; one per (session, student) pair."""
    return f"{session_id}_{student_id}"


def manual_record_key(student_id: str, course_id: str, on_date: str) -> str:
    """Document key of a manually created record; one per (student, course, date)."""
    return f"manual_{student_id}_{course_id}_{on_date}"


@dataclass(frozen=True)
class AttendanceRecord:
    student_id: str
    course_id: str
    faculty_id: str
    status: AttendanceStatus
    date: str
    timestamp: datetime
    marked_via: MarkedVia
    session_id: Optional[str] = None
    session_title: str = ""
    student_name: str = ""
    location: str = ""
    record_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    def to_document(self) -> dict:
        doc = {
            "studentId": self.student_id,
            "studentName": self.student_name,
            "courseId": self.course_id,
            "facultyId": self.faculty_id,
            "sessionTitle": self.session_title,
            "date": self.date,
            "timestamp": to_iso(self.timestamp),
            "status": self.status.value,
            "location": self.location,
            "markedVia": self.marked_via.value,
        }
        if self.session_id is not None:
            doc["sessionId"] = self.session_id
        if self.updated_at is not None:
            doc["updatedAt"] = to_iso(self.updated_at)
        return doc

    def to_dict(self) -> dict:
        out = self.to_document()
        if self.record_id is not None:
            out["id"] = self.record_id
        return out

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "AttendanceRecord":
        updated_at = data.get("updatedAt")
        return cls(
            record_id=doc_id,
            student_id=str(data["studentId"]),
            course_id=str(data["courseId"]),
            faculty_id=str(data.get("facultyId") or ""),
            status=AttendanceStatus(data["status"]),
            date=str(data["date"]),
            timestamp=parse_iso(data["timestamp"]),
            marked_via=MarkedVia(data.get("markedVia") or MarkedVia.MANUAL.value),
            session_id=data.get("sessionId"),
            session_title=data.get("sessionTitle") or "",
            student_name=data.get("studentName") or "",
            location=data.get("location") or "",
            updated_at=parse_iso(updated_at) if updated_at else None,
        )


@dataclass(frozen=True)
class ManualMarkResult:
    student_id: Optional[str]
    outcome: str
    error: Optional[str] = None
    record_id: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"studentId": self.student_id, "status": self.outcome}
        if self.error:
            out["error"] = self.error
        if self.record_id:
            out["recordId"] = self.record_id
        return out
