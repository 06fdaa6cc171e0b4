"""Constants and defaults.

Collection names live here so repositories and bootstrap code agree on them.
"""

SESSIONS_COLLECTION = "attendance_sessions"
ATTENDANCE_COLLECTION = "attendance"
ENROLLMENTS_COLLECTION = "enrollments"
COURSES_COLLECTION = "courses"
STUDENTS_COLLECTION = "students"

QR_PAYLOAD_TYPE = "attendance"

DEFAULT_SESSION_MINUTES = 30
MIN_SESSION_MINUTES = 1
MAX_SESSION_MINUTES = 180

MANUAL_ENTRY_TITLE = "Manual Entry"

# Manual marks re-read and retry when a concurrent request wins the insert race
MANUAL_MARK_ATTEMPTS = 3
