from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles carried in the identity credential."""

    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class MarkedVia(str, Enum):
    QR_CODE = "qr_code"
    MANUAL = "manual"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class SessionStatus(str, Enum):
    """Effective status of a session at a given instant."""

    OPEN = "open"
    EXPIRED = "expired"
    CLOSED = "closed"


class ManualMarkOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    ERROR = "error"
