from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from campus_attendance.attendance import encoder
from campus_attendance.core.exceptions import MalformedPayloadError


def test_encode_produces_wire_format():
    payload = encoder.encode("sess-1", "CS101", datetime(2026, 2, 2, 9, 0, tzinfo=timezone.utc))

    assert json.loads(payload) == {
        "sessionId": "sess-1",
        "courseId": "CS101",
        "type": "attendance",
        "timestamp": "2026-02-02T09:00:00.000Z",
    }


def test_decode_reads_encoded_payload():
    qr = encoder.decode(encoder.encode("sess-1", "CS101", datetime(2026, 2, 2, tzinfo=timezone.utc)))

    assert qr.session_id == "sess-1"
    assert qr.course_id == "CS101"
    assert qr.type == "attendance"


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "",
        "[1, 2]",
        json.dumps({"sessionId": "s", "courseId": "c", "type": "other"}),
        json.dumps({"sessionId": "s", "courseId": "c"}),
        json.dumps({"courseId": "c", "type": "attendance"}),
        json.dumps({"sessionId": "s", "courseId": 5, "type": "attendance"}),
        None,
    ],
)
def test_decode_rejects_malformed_payloads(payload):
    with pytest.raises(MalformedPayloadError):
        encoder.decode(payload)
