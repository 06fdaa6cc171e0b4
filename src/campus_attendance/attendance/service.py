from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..academics.model import Course
from ..academics.repository import CourseRepository, EnrollmentRepository, StudentRepository
from ..auth.identity import Principal
from ..auth.policy import Capability, can_act_for_owner, require_capability
from ..common.datetime_utils import iso_date, now_utc, parse_iso_date, to_iso
from ..core.constants import MANUAL_ENTRY_TITLE, MANUAL_MARK_ATTEMPTS
from ..core.enums import AttendanceStatus, ManualMarkOutcome, MarkedVia
from ..core.exceptions import (
    AlreadyMarkedError,
    DocumentExistsError,
    MalformedPayloadError,
    NotEnrolledError,
    NotFoundError,
    SessionClosedError,
    SessionExpiredError,
    TransientError,
    ValidationError,
)
from ..sessions.repository import SessionRepository
from . import encoder
from .model import AttendanceRecord, ManualMarkResult, manual_record_key
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Redemption engine: turns scanned codes and manual entries into attendance records."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        enrollments: EnrollmentRepository,
        courses: CourseRepository,
        students: Optional[StudentRepository] = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._enrollments = enrollments
        self._courses = courses
        self._students = students

    def redeem(
        self,
        actor: Principal,
        payload: Any,
        *,
        location: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        require_capability(actor.role, Capability.MARK_ATTENDANCE)
        student_id = actor.user_id

        qr = encoder.decode(payload)
        now = now or now_utc()

        session = self._sessions.get_by_id(qr.session_id)
        if not session:
            raise NotFoundError("Attendance session not found")
        if qr.course_id != session.course_id:
            raise MalformedPayloadError("QR code does not match its session")

        if not session.is_active:
            logger.info("scan by %s rejected: session %s is closed", student_id, session.session_id)
            raise SessionClosedError("Attendance session is no longer active")

        if now > session.expires_at:
            self._sessions.deactivate(session.session_id, now=now)
            logger.info("scan by %s rejected: session %s expired", student_id, session.session_id)
            raise SessionExpiredError("Attendance session has expired")

        if not self._enrollments.has_active_enrollment(student_id=student_id, course_id=session.course_id):
            logger.info("scan by %s rejected: not enrolled in %s", student_id, session.course_id)
            raise NotEnrolledError("You are not enrolled in this course")

        record = AttendanceRecord(
            student_id=student_id,
            student_name=self._student_name(student_id),
            course_id=session.course_id,
            session_id=session.session_id,
            session_title=session.session_title,
            faculty_id=session.faculty_id,
            status=AttendanceStatus.PRESENT,
            date=iso_date(now),
            timestamp=now,
            marked_via=MarkedVia.QR_CODE,
            location=(location or "").strip(),
        )
        if not self._attendance.create_qr_record(record):
            logger.info("scan by %s rejected: already marked for session %s", student_id, session.session_id)
            raise AlreadyMarkedError("Attendance already marked for this session")

        try:
            self._sessions.increment_attendance(session.session_id, now=now)
        except TransientError:
            # The record is committed; the session attendance view recomputes the count.
            logger.warning("attendance count increment failed for session %s", session.session_id)

        logger.info("attendance marked: student=%s session=%s", student_id, session.session_id)
        return record

    def manual_mark(
        self,
        actor: Principal,
        entries: Any,
        *,
        now: Optional[datetime] = None,
    ) -> list[ManualMarkResult]:
        require_capability(actor.role, Capability.MANAGE_SESSIONS)
        if not isinstance(entries, (list, tuple)) or not entries:
            raise ValidationError("Attendance records array is required")

        now = now or now_utc()
        results: list[Optional[ManualMarkResult]] = []
        course_cache: dict[str, Optional[Course]] = {}

        # Keyed by (studentId, courseId, date) so repeats inside one request collapse.
        staged: dict[tuple[str, str, str], _StagedMark] = {}

        for entry in entries:
            if not isinstance(entry, dict):
                results.append(self._error(None, "Missing required fields"))
                continue

            student_id = _text(entry.get("studentId"))
            course_id = _text(entry.get("courseId"))
            status_s = _text(entry.get("status"))
            date_s = _text(entry.get("date"))
            title = _text(entry.get("sessionTitle", entry.get("title")))

            if not student_id or not course_id or not status_s or not date_s:
                results.append(self._error(student_id, "Missing required fields"))
                continue

            try:
                status = AttendanceStatus(status_s.lower())
            except ValueError:
                results.append(self._error(student_id, "Invalid status"))
                continue

            try:
                on_date = parse_iso_date(date_s).strftime("%Y-%m-%d")
            except ValueError:
                results.append(self._error(student_id, "Invalid date"))
                continue

            if course_id not in course_cache:
                course_cache[course_id] = self._courses.get_by_id(course_id)
            course = course_cache[course_id]
            if not course or not can_act_for_owner(
                role=actor.role, actor_id=actor.user_id, owner_id=course.faculty_id
            ):
                results.append(self._error(student_id, "Access denied to course"))
                continue

            if not self._enrollments.has_active_enrollment(student_id=student_id, course_id=course_id):
                results.append(self._error(student_id, "Student not enrolled in course"))
                continue

            key = (student_id, course_id, on_date)
            mark = staged.get(key)
            if mark is None:
                staged[key] = _StagedMark(faculty_id=course.faculty_id, status=status, title=title)
                mark = staged[key]
            else:
                mark.status = status
                mark.title = title or mark.title
            mark.positions.append(len(results))
            results.append(None)

        written = self._write_manual_marks(actor, staged, now) if staged else {}

        created = updated = 0
        for key, mark in staged.items():
            record_id, outcome = written[key]
            if outcome is ManualMarkOutcome.CREATED:
                created += 1
            else:
                updated += 1
            for n, position in enumerate(mark.positions):
                # later repeats of a key overwrite the first write
                entry_outcome = outcome if n == 0 else ManualMarkOutcome.UPDATED
                results[position] = ManualMarkResult(key[0], entry_outcome.value, record_id=record_id)

        failed = sum(1 for r in results if r is not None and r.outcome == ManualMarkOutcome.ERROR.value)
        logger.info(
            "manual attendance by %s: %d entries, %d created, %d updated, %d failed",
            actor.user_id,
            len(results),
            created,
            updated,
            failed,
        )
        return [r for r in results if r is not None]

    def _write_manual_marks(
        self,
        actor: Principal,
        staged: dict[tuple[str, str, str], _StagedMark],
        now: datetime,
    ) -> dict[tuple[str, str, str], tuple[str, ManualMarkOutcome]]:
        for attempt in range(1, MANUAL_MARK_ATTEMPTS + 1):
            creates: list[AttendanceRecord] = []
            updates: list[tuple[str, dict]] = []
            outcomes: dict[tuple[str, str, str], tuple[str, ManualMarkOutcome]] = {}

            for key, mark in staged.items():
                student_id, course_id, on_date = key
                found = self._attendance.find_for_student_course_date(
                    student_id=student_id, course_id=course_id, on_date=on_date
                )
                if found is not None:
                    fields = {
                        "status": mark.status.value,
                        "timestamp": to_iso(now),
                        "updatedAt": to_iso(now),
                        "updatedBy": actor.user_id,
                    }
                    if mark.title:
                        fields["sessionTitle"] = mark.title
                    updates.append((found.record_id, fields))
                    outcomes[key] = (found.record_id, ManualMarkOutcome.UPDATED)
                    continue

                record_id = manual_record_key(student_id, course_id, on_date)
                creates.append(
                    AttendanceRecord(
                        record_id=record_id,
                        student_id=student_id,
                        student_name=self._student_name(student_id),
                        course_id=course_id,
                        faculty_id=mark.faculty_id,
                        session_title=mark.title or MANUAL_ENTRY_TITLE,
                        status=mark.status,
                        date=on_date,
                        timestamp=now,
                        marked_via=MarkedVia.MANUAL,
                    )
                )
                outcomes[key] = (record_id, ManualMarkOutcome.CREATED)

            try:
                self._attendance.save_manual_marks(creates=creates, updates=updates)
                return outcomes
            except DocumentExistsError:
                # Another request created one of these records first; re-read so it becomes an update.
                logger.info(
                    "manual attendance by %s lost an insert race (attempt %d of %d)",
                    actor.user_id,
                    attempt,
                    MANUAL_MARK_ATTEMPTS,
                )

        raise TransientError("Attendance records changed concurrently; retry the request")

    def _student_name(self, student_id: str) -> str:
        if not self._students:
            return ""
        profile = self._students.get_by_id(student_id)
        return profile.full_name if profile else ""

    @staticmethod
    def _error(student_id: Optional[str], message: str) -> ManualMarkResult:
        return ManualMarkResult(student_id, ManualMarkOutcome.ERROR.value, error=message)


@dataclass
class _StagedMark:
    faculty_id: str
    status: AttendanceStatus
    title: str
    positions: list[int] = field(default_factory=list)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
