from __future__ import annotations

import json

import pytest

from campus_attendance.auth.identity import TokenVerifier
from campus_attendance.core.enums import Role
from campus_attendance.main import create_app

PREFIX = "/api/attendance"
# matches config.testing
JWT_SECRET = "test-jwt-secret-for-the-suite-only-0001"


@pytest.fixture
def app(store):
    return create_app(settings_module="config.testing", store=store)


@pytest.fixture
def client(app):
    return app.test_client()


def _headers(user_id: str, role: Role) -> dict:
    token = TokenVerifier(JWT_SECRET).issue(user_id, role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def faculty_headers():
    return _headers("fac-1", Role.FACULTY)


@pytest.fixture
def student_headers():
    return _headers("stu-1", Role.STUDENT)


def _generate(client, headers, **overrides):
    body = {"courseId": "CS101", "sessionTitle": "Week 1", "duration": 30, "location": "Hall A"}
    body.update(overrides)
    return client.post(f"{PREFIX}/generate-qr", json=body, headers=headers)


def test_health(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "OK"
    assert body["environment"] == "testing"
    assert body["store"] == "Connected"


def test_unknown_api_route_is_json_404(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json()["error"] == "API endpoint not found"


def test_missing_token_is_401(client):
    resp = _generate(client, {})
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "unauthenticated"


def test_bad_token_is_401(client):
    resp = _generate(client, {"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_generate_qr_returns_session_and_image(client, faculty_headers):
    resp = _generate(client, faculty_headers)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["qrCode"].startswith("data:image/png;base64,")
    assert body["session"]["status"] == "open"
    assert body["session"]["isActive"] is True
    qr = json.loads(body["qrData"])
    assert qr["type"] == "attendance"
    assert qr["sessionId"] == body["session"]["sessionId"]
    assert qr["courseId"] == "CS101"


@pytest.mark.parametrize("duration", [0, 181])
def test_generate_qr_rejects_bad_duration(client, faculty_headers, duration):
    resp = _generate(client, faculty_headers, duration=duration)
    assert resp.status_code == 400


def test_generate_qr_requires_faculty(client, student_headers):
    assert _generate(client, student_headers).status_code == 403


def test_generate_qr_for_foreign_course_is_403(client, faculty_headers):
    assert _generate(client, faculty_headers, courseId="MA201").status_code == 403


def test_generate_qr_requires_json_body(client, faculty_headers):
    resp = client.post(f"{PREFIX}/generate-qr", data="oops", headers=faculty_headers)
    assert resp.status_code == 400


def test_mark_attendance_flow(client, faculty_headers, student_headers):
    qr_data = _generate(client, faculty_headers).get_json()["qrData"]

    first = client.post(f"{PREFIX}/mark-attendance", json={"qrData": qr_data}, headers=student_headers)
    assert first.status_code == 200
    assert first.get_json()["attendance"]["status"] == "present"

    again = client.post(
        f"{PREFIX}/mark-attendance", json={"qrData": json.loads(qr_data)}, headers=student_headers
    )
    assert again.status_code == 409
    assert again.get_json()["code"] == "already_marked"


def test_mark_attendance_error_statuses(client, faculty_headers):
    qr_data = _generate(client, faculty_headers).get_json()["qrData"]

    not_enrolled = client.post(
        f"{PREFIX}/mark-attendance", json={"qrData": qr_data}, headers=_headers("stu-3", Role.STUDENT)
    )
    assert not_enrolled.status_code == 403

    malformed = client.post(
        f"{PREFIX}/mark-attendance", json={"qrData": "garbage"}, headers=_headers("stu-2", Role.STUDENT)
    )
    assert malformed.status_code == 400

    missing = client.post(f"{PREFIX}/mark-attendance", json={}, headers=_headers("stu-2", Role.STUDENT))
    assert missing.status_code == 400


def test_closed_session_is_410(client, faculty_headers, student_headers):
    body = _generate(client, faculty_headers).get_json()
    session_id = body["session"]["sessionId"]

    closed = client.put(f"{PREFIX}/sessions/{session_id}/close", headers=faculty_headers)
    assert closed.status_code == 200

    resp = client.post(f"{PREFIX}/mark-attendance", json={"qrData": body["qrData"]}, headers=student_headers)
    assert resp.status_code == 410
    assert resp.get_json()["code"] == "session_closed"


def test_sessions_listing_and_detail(client, faculty_headers, student_headers):
    created = _generate(client, faculty_headers).get_json()["session"]
    qr_data = _generate(client, faculty_headers, sessionTitle="Week 2").get_json()["qrData"]
    client.post(f"{PREFIX}/mark-attendance", json={"qrData": qr_data}, headers=student_headers)

    listing = client.get(f"{PREFIX}/sessions?includeExpired=true", headers=faculty_headers)
    assert listing.status_code == 200
    sessions = listing.get_json()["sessions"]
    assert len(sessions) == 2
    assert sessions[0]["courseDetails"]["courseName"] == "Programming I"

    detail = client.get(f"{PREFIX}/sessions/{created['sessionId']}/attendance", headers=faculty_headers)
    assert detail.status_code == 200
    assert detail.get_json()["statistics"]["totalEnrolled"] == 2

    other = _headers("fac-2", Role.FACULTY)
    assert client.get(f"{PREFIX}/sessions/{created['sessionId']}", headers=other).status_code == 403
    assert client.get(f"{PREFIX}/sessions/missing", headers=faculty_headers).status_code == 404


def test_delete_session_reports_removed_records(client, faculty_headers, student_headers):
    body = _generate(client, faculty_headers).get_json()
    client.post(f"{PREFIX}/mark-attendance", json={"qrData": body["qrData"]}, headers=student_headers)

    resp = client.delete(f"{PREFIX}/sessions/{body['session']['sessionId']}", headers=faculty_headers)

    assert resp.status_code == 200
    assert resp.get_json()["deletedRecords"] == 1
    gone = client.get(f"{PREFIX}/sessions/{body['session']['sessionId']}", headers=faculty_headers)
    assert gone.status_code == 404


def test_manual_mark_endpoint(client, faculty_headers):
    resp = client.post(
        f"{PREFIX}/manual-mark",
        json={
            "attendanceRecords": [
                {"studentId": "stu-1", "courseId": "CS101", "status": "present", "date": "2026-02-02"},
                {"studentId": "stu-1", "courseId": "CS101", "status": "bogus", "date": "2026-02-02"},
            ]
        },
        headers=faculty_headers,
    )

    assert resp.status_code == 200
    results = resp.get_json()["results"]
    assert results[0]["status"] == "created"
    assert results[1] == {"studentId": "stu-1", "status": "error", "error": "Invalid status"}

    empty = client.post(f"{PREFIX}/manual-mark", json={"attendanceRecords": []}, headers=faculty_headers)
    assert empty.status_code == 400


def test_statistics_endpoint_for_student(client, faculty_headers, student_headers):
    qr_data = _generate(client, faculty_headers).get_json()["qrData"]
    client.post(f"{PREFIX}/mark-attendance", json={"qrData": qr_data}, headers=student_headers)

    resp = client.get(f"{PREFIX}/statistics", headers=student_headers)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["statistics"]["totalRecords"] == 1
    assert body["statistics"]["attendancePercentage"] == 100.0
    assert set(body["courseStats"]) == {"CS101"}

    bad = client.get(f"{PREFIX}/statistics?startDate=soon", headers=student_headers)
    assert bad.status_code == 400
