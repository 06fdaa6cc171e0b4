from __future__ import annotations

from datetime import timedelta

import pytest

from campus_attendance.auth.identity import Principal
from campus_attendance.core.enums import Role
from campus_attendance.core.exceptions import ValidationError


def _record(student_id, course_id, faculty_id, status, day):
    return {
        "studentId": student_id,
        "courseId": course_id,
        "facultyId": faculty_id,
        "status": status,
        "date": day,
        "timestamp": f"{day}T09:00:00.000Z",
        "markedVia": "manual",
    }


@pytest.fixture
def populated(store):
    rows = {
        "r1": _record("stu-1", "CS101", "fac-1", "present", "2026-02-01"),
        "r2": _record("stu-2", "CS101", "fac-1", "absent", "2026-02-01"),
        "r3": _record("stu-1", "CS101", "fac-1", "present", "2026-02-02"),
        "r4": _record("stu-1", "MA201", "fac-2", "absent", "2026-02-02"),
        "r5": _record("stu-2", "MA201", "fac-2", "present", "2026-02-03"),
    }
    for doc_id, data in rows.items():
        store.set("attendance", doc_id, data)
    return store


def test_student_sees_only_own_records(container, populated, student):
    report = container.statistics_service.build_statistics(student, student_id="stu-2")

    assert report.statistics == {
        "totalRecords": 3,
        "presentRecords": 2,
        "absentRecords": 1,
        "attendancePercentage": 66.67,
    }
    assert list(report.daily_stats) == ["2026-02-01", "2026-02-02"]
    assert report.daily_stats["2026-02-02"] == {"present": 1, "absent": 1, "total": 2}
    assert report.course_stats["CS101"]["courseName"] == "Programming I"
    assert report.course_stats["MA201"]["absent"] == 1


def test_faculty_sees_records_they_own(container, populated, faculty):
    report = container.statistics_service.build_statistics(faculty)

    assert report.statistics["totalRecords"] == 3
    assert set(report.course_stats) == {"CS101"}


def test_admin_and_staff_see_everything(container, populated, admin):
    staff = Principal(user_id="staff-1", role=Role.STAFF)

    for actor in (admin, staff):
        report = container.statistics_service.build_statistics(actor)
        assert report.statistics["totalRecords"] == 5
        assert report.statistics["attendancePercentage"] == 60.0


def test_admin_can_narrow_to_one_student(container, populated, admin):
    report = container.statistics_service.build_statistics(admin, student_id="stu-2")
    assert report.statistics["totalRecords"] == 2


def test_course_filter_omits_course_breakdown(container, populated, admin):
    report = container.statistics_service.build_statistics(admin, course_id="MA201")

    assert report.statistics["totalRecords"] == 2
    assert report.course_stats is None
    assert report.to_dict()["courseStats"] is None


def test_date_range_is_inclusive(container, populated, admin):
    report = container.statistics_service.build_statistics(
        admin, start_date="2026-02-02", end_date="2026-02-02"
    )
    assert report.statistics["totalRecords"] == 2
    assert list(report.daily_stats) == ["2026-02-02"]


def test_empty_result_reports_zero(container, admin):
    report = container.statistics_service.build_statistics(admin)

    assert report.statistics == {
        "totalRecords": 0,
        "presentRecords": 0,
        "absentRecords": 0,
        "attendancePercentage": 0,
    }
    assert report.daily_stats == {}
    assert report.course_stats is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start_date": "yesterday"},
        {"end_date": "2026-13-01"},
        {"start_date": "2026-02-03", "end_date": "2026-02-01"},
    ],
)
def test_bad_dates_are_rejected(container, admin, kwargs):
    with pytest.raises(ValidationError):
        container.statistics_service.build_statistics(admin, **kwargs)


def test_qr_marks_show_up_in_statistics(container, faculty, student, fixed_now):
    from campus_attendance.attendance import encoder

    session = container.session_service.create_session(
        faculty, course_id="CS101", title="Lecture", duration_minutes=15, now=fixed_now
    )
    container.attendance_service.redeem(
        student,
        encoder.encode(session.session_id, "CS101", fixed_now),
        now=fixed_now + timedelta(minutes=3),
    )

    report = container.statistics_service.build_statistics(student)
    assert report.statistics["presentRecords"] == 1
    assert report.daily_stats == {"2026-02-02": {"present": 1, "absent": 0, "total": 1}}
