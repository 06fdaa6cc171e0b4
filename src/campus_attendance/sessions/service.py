from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..academics.repository import CourseRepository, EnrollmentRepository, StudentRepository
from ..attendance.repository import AttendanceRepository
from ..auth.identity import Principal
from ..auth.policy import Capability, can_act_for_owner, has_capability, require_capability
from ..common.datetime_utils import now_utc
from ..common.validators import require_int_in_range, require_non_empty
from ..core import constants
from ..core.enums import AttendanceStatus, MarkedVia
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import AttendanceSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionListing:
    session: AttendanceSession
    course_details: Optional[dict]


@dataclass(frozen=True)
class SessionAttendanceView:
    session: AttendanceSession
    records: list
    enrolled_students: list[dict]
    statistics: dict


class SessionService:
    """Session registry: create, read, close and delete attendance sessions.

    Reads never write: expiry is reported through the session's effective
    status. The persisted flag is flipped by the redemption path or by close.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        courses: CourseRepository,
        *,
        attendance: Optional[AttendanceRepository] = None,
        enrollments: Optional[EnrollmentRepository] = None,
        students: Optional[StudentRepository] = None,
        default_minutes: int = constants.DEFAULT_SESSION_MINUTES,
        min_minutes: int = constants.MIN_SESSION_MINUTES,
        max_minutes: int = constants.MAX_SESSION_MINUTES,
    ):
        self._sessions = sessions
        self._courses = courses
        self._attendance = attendance
        self._enrollments = enrollments
        self._students = students
        self._default_minutes = int(default_minutes)
        self._min_minutes = int(min_minutes)
        self._max_minutes = int(max_minutes)

    def create_session(
        self,
        actor: Principal,
        *,
        course_id: str,
        title: str,
        duration_minutes=None,
        location: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceSession:
        require_capability(actor.role, Capability.MANAGE_SESSIONS)
        course_id = require_non_empty(course_id, "Course ID")
        title = require_non_empty(title, "Session title")
        if duration_minutes is None or duration_minutes == "":
            duration_minutes = self._default_minutes
        duration = require_int_in_range(
            duration_minutes, "Duration", minimum=self._min_minutes, maximum=self._max_minutes
        )

        course = self._courses.get_by_id(course_id)
        if not course:
            raise NotFoundError("Course not found")
        if not can_act_for_owner(role=actor.role, actor_id=actor.user_id, owner_id=course.faculty_id):
            raise AuthorizationError("Access denied to this course")

        now = now or now_utc()
        session = AttendanceSession(
            session_id=uuid.uuid4().hex,
            course_id=course_id,
            faculty_id=actor.user_id,
            session_title=title,
            location=(location or "").strip(),
            created_at=now,
            expires_at=now + timedelta(minutes=duration),
            duration=duration,
            is_active=True,
            attendance_count=0,
        )
        self._sessions.create(session)
        logger.info(
            "attendance session %s created for course %s by %s (%d min)",
            session.session_id,
            course_id,
            actor.user_id,
            duration,
        )
        return session

    def get_session(self, session_id: str, *, actor: Optional[Principal] = None) -> AttendanceSession:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session not found")
        if actor is not None:
            self._require_owner(actor, session)
        return session

    def list_sessions(
        self,
        actor: Principal,
        *,
        course_id: Optional[str] = None,
        include_expired: bool = False,
        now: Optional[datetime] = None,
    ) -> Sequence[SessionListing]:
        require_capability(actor.role, Capability.MANAGE_SESSIONS)
        now = now or now_utc()

        owner_filter = None
        if not has_capability(actor.role, Capability.OVERRIDE_OWNERSHIP):
            owner_filter = actor.user_id

        sessions = self._sessions.list(faculty_id=owner_filter, course_id=course_id or None)
        if not include_expired:
            sessions = [s for s in sessions if s.is_open(now)]

        course_cache: dict[str, Optional[dict]] = {}
        out: list[SessionListing] = []
        for s in sessions:
            if s.course_id not in course_cache:
                course = self._courses.get_by_id(s.course_id)
                course_cache[s.course_id] = course.to_dict() if course else None
            out.append(SessionListing(session=s, course_details=course_cache[s.course_id]))

        out.sort(key=lambda item: item.session.created_at, reverse=True)
        return out

    def close_session(self, actor: Principal, session_id: str, *, now: Optional[datetime] = None) -> None:
        require_capability(actor.role, Capability.MANAGE_SESSIONS)
        session = self.get_session(session_id, actor=actor)
        if not session.is_active and session.closed_at is not None:
            return

        now = now or now_utc()
        self._sessions.deactivate(session_id, now=now, closed=True)
        logger.info("attendance session %s closed by %s", session_id, actor.user_id)

    def delete_session(self, actor: Principal, session_id: str) -> int:
        require_capability(actor.role, Capability.MANAGE_SESSIONS)
        self.get_session(session_id, actor=actor)

        removed = self._sessions.delete_with_records(session_id)
        logger.info(
            "attendance session %s deleted by %s (%d records removed)",
            session_id,
            actor.user_id,
            removed,
        )
        return removed

    def get_session_attendance(
        self,
        actor: Principal,
        session_id: str,
        *,
        now: Optional[datetime] = None,
    ) -> SessionAttendanceView:
        require_capability(actor.role, Capability.MANAGE_SESSIONS)
        if self._attendance is None or self._enrollments is None:
            raise RuntimeError("SessionService was built without attendance/enrollment repositories")

        now = now or now_utc()
        session = self.get_session(session_id, actor=actor)
        records = list(self._attendance.list_for_session(session_id))
        records.sort(key=lambda r: r.timestamp)

        qr_count = sum(1 for r in records if r.marked_via is MarkedVia.QR_CODE)
        if qr_count != session.attendance_count:
            logger.warning(
                "attendance count drift on session %s: stored=%d records=%d; repairing",
                session_id,
                session.attendance_count,
                qr_count,
            )
            repaired = self._sessions.repair_attendance_count(
                session_id, expected=session.attendance_count, count=qr_count, now=now
            )
            if not repaired:
                logger.info("attendance count on session %s moved during repair; left as is", session_id)
            # the view always reports what the records say
            session = session.with_count(qr_count)

        present_ids = {r.student_id for r in records if r.status is AttendanceStatus.PRESENT}
        enrolled: list[dict] = []
        for enrollment in self._enrollments.list_active_for_course(session.course_id):
            profile = self._students.get_by_id(enrollment.student_id) if self._students else None
            if profile is None:
                continue
            has_attended = enrollment.student_id in present_ids
            enrolled.append(
                {
                    "studentId": enrollment.student_id,
                    "studentName": profile.full_name,
                    "email": profile.email,
                    "rollNumber": profile.roll_number,
                    "hasAttended": has_attended,
                    "attendanceStatus": (
                        AttendanceStatus.PRESENT.value if has_attended else AttendanceStatus.ABSENT.value
                    ),
                }
            )

        total_enrolled = len(enrolled)
        total_present = sum(1 for s in enrolled if s["hasAttended"])
        statistics = {
            "totalEnrolled": total_enrolled,
            "totalPresent": total_present,
            "totalAbsent": total_enrolled - total_present,
            "attendancePercentage": int(total_present * 100 / total_enrolled + 0.5) if total_enrolled else 0,
        }
        return SessionAttendanceView(
            session=session,
            records=records,
            enrolled_students=enrolled,
            statistics=statistics,
        )

    def _require_owner(self, actor: Principal, session: AttendanceSession) -> None:
        if not can_act_for_owner(role=actor.role, actor_id=actor.user_id, owner_id=session.faculty_id):
            raise AuthorizationError("Access denied to this session")
