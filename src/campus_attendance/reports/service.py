from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..academics.repository import CourseRepository
from ..attendance.repository import AttendanceRepository
from ..auth.identity import Principal
from ..auth.policy import Capability, StatisticsScope, require_capability, statistics_scope
from ..common.validators import optional_date
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class StatisticsReport:
    statistics: dict
    daily_stats: dict[str, dict]
    course_stats: Optional[dict[str, dict]]

    def to_dict(self) -> dict:
        return {
            "statistics": self.statistics,
            "dailyStats": self.daily_stats,
            "courseStats": self.course_stats,
        }


class StatisticsService:
    """Role-scoped attendance aggregates (totals, per day, per course)."""

    def __init__(self, attendance: AttendanceRepository, courses: CourseRepository):
        self._attendance = attendance
        self._courses = courses

    def build_statistics(
        self,
        actor: Principal,
        *,
        course_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        student_id: Optional[str] = None,
    ) -> StatisticsReport:
        require_capability(actor.role, Capability.VIEW_STATISTICS)

        start = optional_date(start_date, "startDate")
        end = optional_date(end_date, "endDate")
        if start and end and end < start:
            raise ValidationError("endDate must be on or after startDate")

        scope = statistics_scope(actor.role)
        faculty_filter = None
        student_filter = student_id or None
        if scope is StatisticsScope.OWN_RECORDS:
            student_filter = actor.user_id
        elif scope is StatisticsScope.OWN_COURSES:
            faculty_filter = actor.user_id

        records = self._attendance.search(
            student_id=student_filter,
            faculty_id=faculty_filter,
            course_id=course_id or None,
            start_date=start,
            end_date=end,
        )

        total = len(records)
        present = sum(1 for r in records if r.status is AttendanceStatus.PRESENT)
        percentage = (present / total) * 100 if total else 0

        daily: dict[str, dict] = {}
        for r in records:
            day = daily.setdefault(r.date, {"present": 0, "absent": 0, "total": 0})
            day[r.status.value] += 1
            day["total"] += 1

        course_stats: dict[str, dict] = {}
        if not course_id:
            for r in records:
                stats = course_stats.get(r.course_id)
                if stats is None:
                    course = self._courses.get_by_id(r.course_id)
                    stats = {
                        "present": 0,
                        "absent": 0,
                        "total": 0,
                        "courseName": course.course_name if course else "",
                    }
                    course_stats[r.course_id] = stats
                stats[r.status.value] += 1
                stats["total"] += 1

        return StatisticsReport(
            statistics={
                "totalRecords": total,
                "presentRecords": present,
                "absentRecords": total - present,
                "attendancePercentage": round(percentage, 2),
            },
            daily_stats=dict(sorted(daily.items())),
            course_stats=course_stats or None,
        )
