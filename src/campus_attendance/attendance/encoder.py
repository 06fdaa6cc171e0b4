"""QR payload codec.

The payload is the compact JSON embedded in the scannable code:
``{"sessionId": ..., "courseId": ..., "type": "attendance", "timestamp": ...}``.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import to_iso
from ..core.constants import QR_PAYLOAD_TYPE
from ..core.exceptions import MalformedPayloadError


@dataclass(frozen=True)
class QRPayload:
    session_id: str
    course_id: str
    type: str
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "courseId": self.course_id,
            "type": self.type,
            "timestamp": self.timestamp,
        }


def encode(session_id: str, course_id: str, timestamp: datetime) -> str:
    payload = QRPayload(
        session_id=session_id,
        course_id=course_id,
        type=QR_PAYLOAD_TYPE,
        timestamp=to_iso(timestamp),
    )
    return json.dumps(payload.to_dict(), separators=(",", ":"))


def decode(payload) -> QRPayload:
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedPayloadError("Invalid QR code data")
    if not isinstance(payload, str) or not payload.strip():
        raise MalformedPayloadError("Invalid QR code data")

    try:
        data = json.loads(payload)
    except ValueError:
        raise MalformedPayloadError("Invalid QR code data")
    if not isinstance(data, dict):
        raise MalformedPayloadError("Invalid QR code data")

    if data.get("type") != QR_PAYLOAD_TYPE:
        raise MalformedPayloadError("Invalid QR code type")

    session_id = data.get("sessionId")
    course_id = data.get("courseId")
    if not isinstance(session_id, str) or not session_id:
        raise MalformedPayloadError("Invalid QR code data")
    if not isinstance(course_id, str) or not course_id:
        raise MalformedPayloadError("Invalid QR code data")

    timestamp = data.get("timestamp")
    return QRPayload(
        session_id=session_id,
        course_id=course_id,
        type=QR_PAYLOAD_TYPE,
        timestamp=timestamp if isinstance(timestamp, str) else "",
    )
