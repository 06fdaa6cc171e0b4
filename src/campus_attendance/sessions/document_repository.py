from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import to_iso
from ..core.constants import ATTENDANCE_COLLECTION, SESSIONS_COLLECTION
from ..store.base import DocumentStore, where
from .model import AttendanceSession
from .repository import SessionRepository


class DocumentSessionRepository(SessionRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def create(self, session: AttendanceSession) -> None:
        self._store.set(SESSIONS_COLLECTION, session.session_id, session.to_document())

    def get_by_id(self, session_id: str) -> Optional[AttendanceSession]:
        doc = self._store.get(SESSIONS_COLLECTION, session_id)
        if not doc:
            return None
        return AttendanceSession.from_document(doc.id, doc.data)

    def list(
        self,
        *,
        faculty_id: Optional[str] = None,
        course_id: Optional[str] = None,
    ) -> Sequence[AttendanceSession]:
        filters = []
        if faculty_id is not None:
            filters.append(where("facultyId", "==", faculty_id))
        if course_id is not None:
            filters.append(where("courseId", "==", course_id))

        docs = self._store.query(SESSIONS_COLLECTION, filters)
        return [AttendanceSession.from_document(d.id, d.data) for d in docs]

    def deactivate(self, session_id: str, *, now: datetime, closed: bool = False) -> bool:
        fields: dict = {"isActive": False, "updatedAt": to_iso(now)}
        if closed:
            fields["closedAt"] = to_iso(now)
        return self._store.update(SESSIONS_COLLECTION, session_id, fields)

    def increment_attendance(self, session_id: str, *, now: datetime) -> bool:
        ok = self._store.increment(SESSIONS_COLLECTION, session_id, "attendanceCount", 1)
        if ok:
            self._store.update(SESSIONS_COLLECTION, session_id, {"updatedAt": to_iso(now)})
        return ok

    def repair_attendance_count(self, session_id: str, *, expected: int, count: int, now: datetime) -> bool:
        ok = self._store.compare_and_set(
            SESSIONS_COLLECTION, session_id, "attendanceCount", expected=int(expected), value=int(count)
        )
        if ok:
            self._store.update(SESSIONS_COLLECTION, session_id, {"updatedAt": to_iso(now)})
        return ok

    def delete_with_records(self, session_id: str) -> int:
        records = self._store.query(ATTENDANCE_COLLECTION, [where("sessionId", "==", session_id)])

        batch = self._store.batch()
        batch.delete(SESSIONS_COLLECTION, session_id)
        for doc in records:
            batch.delete(ATTENDANCE_COLLECTION, doc.id)
        batch.commit()
        return len(records)
