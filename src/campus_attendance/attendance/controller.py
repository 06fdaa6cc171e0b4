from __future__ import annotations

import json

from flask import Flask, jsonify, request

from ..auth.policy import Capability
from ..common.datetime_utils import now_utc
from ..common.validators import parse_bool
from ..container import Container
from ..core.exceptions import ValidationError
from ..web.auth import current_principal, make_auth_decorators
from . import encoder
from .qr_image import render_data_url

API_PREFIX = "/api/attendance"


def register(app: Flask, container: Container) -> None:
    login_required, capability_required = make_auth_decorators(container.token_verifier)
    faculty_required = capability_required(Capability.MANAGE_SESSIONS)
    student_required = capability_required(Capability.MARK_ATTENDANCE)

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Invalid JSON in request body")
        return data

    @app.route(f"{API_PREFIX}/generate-qr", methods=["POST"], endpoint="attendance_generate_qr")
    @faculty_required
    def generate_qr():
        data = _json_body()
        session = container.session_service.create_session(
            current_principal(),
            course_id=data.get("courseId"),
            title=data.get("sessionTitle"),
            duration_minutes=data.get("duration"),
            location=data.get("location"),
        )

        qr_data = encoder.encode(session.session_id, session.course_id, session.created_at)
        qr_code = render_data_url(
            qr_data,
            box_size=int(app.config.get("QR_BOX_SIZE", 10)),
            border=int(app.config.get("QR_BORDER", 2)),
        )
        return (
            jsonify(
                {
                    "message": "QR code generated successfully",
                    "session": session.to_dict(now_utc()),
                    "qrCode": qr_code,
                    "qrData": qr_data,
                }
            ),
            201,
        )

    @app.route(f"{API_PREFIX}/mark-attendance", methods=["POST"], endpoint="attendance_mark")
    @student_required
    def mark_attendance():
        data = _json_body()
        qr_data = data.get("qrData")
        if not qr_data:
            raise ValidationError("QR data is required")
        # Some scanners hand the decoded object back instead of the raw string.
        if isinstance(qr_data, dict):
            qr_data = json.dumps(qr_data)

        record = container.attendance_service.redeem(
            current_principal(),
            qr_data,
            location=data.get("location"),
        )
        return jsonify({"message": "Attendance marked successfully", "attendance": record.to_dict()})

    @app.route(f"{API_PREFIX}/sessions", methods=["GET"], endpoint="attendance_sessions")
    @faculty_required
    def list_sessions():
        now = now_utc()
        listings = container.session_service.list_sessions(
            current_principal(),
            course_id=request.args.get("courseId") or None,
            include_expired=parse_bool(request.args.get("includeExpired")),
            now=now,
        )
        sessions = []
        for item in listings:
            row = item.session.to_dict(now)
            if item.course_details is not None:
                row["courseDetails"] = item.course_details
            sessions.append(row)
        return jsonify({"sessions": sessions})

    @app.route(f"{API_PREFIX}/sessions/<session_id>", methods=["GET"], endpoint="attendance_session")
    @faculty_required
    def get_session(session_id: str):
        session = container.session_service.get_session(session_id, actor=current_principal())
        return jsonify({"session": session.to_dict(now_utc())})

    @app.route(
        f"{API_PREFIX}/sessions/<session_id>/attendance",
        methods=["GET"],
        endpoint="attendance_session_records",
    )
    @faculty_required
    def session_attendance(session_id: str):
        now = now_utc()
        view = container.session_service.get_session_attendance(current_principal(), session_id, now=now)
        return jsonify(
            {
                "session": view.session.to_dict(now),
                "attendanceRecords": [r.to_dict() for r in view.records],
                "enrolledStudents": view.enrolled_students,
                "statistics": view.statistics,
            }
        )

    @app.route(f"{API_PREFIX}/sessions/<session_id>/close", methods=["PUT"], endpoint="attendance_close")
    @faculty_required
    def close_session(session_id: str):
        container.session_service.close_session(current_principal(), session_id)
        return jsonify({"message": "Attendance session closed successfully"})

    @app.route(f"{API_PREFIX}/sessions/<session_id>", methods=["DELETE"], endpoint="attendance_delete")
    @faculty_required
    def delete_session(session_id: str):
        removed = container.session_service.delete_session(current_principal(), session_id)
        return jsonify({"message": "Attendance session deleted successfully", "deletedRecords": removed})

    @app.route(f"{API_PREFIX}/manual-mark", methods=["POST"], endpoint="attendance_manual_mark")
    @faculty_required
    def manual_mark():
        data = _json_body()
        results = container.attendance_service.manual_mark(current_principal(), data.get("attendanceRecords"))
        return jsonify(
            {
                "message": "Manual attendance marking completed",
                "results": [r.to_dict() for r in results],
            }
        )

    @app.route(f"{API_PREFIX}/statistics", methods=["GET"], endpoint="attendance_statistics")
    @login_required
    def statistics():
        report = container.statistics_service.build_statistics(
            current_principal(),
            course_id=request.args.get("courseId") or None,
            start_date=request.args.get("startDate") or None,
            end_date=request.args.get("endDate") or None,
            student_id=request.args.get("studentId") or None,
        )
        return jsonify(report.to_dict())
