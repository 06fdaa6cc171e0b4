class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class MalformedPayloadError(ValidationError):
    """Raised when a scanned QR payload cannot be parsed or is not an attendance code."""

    code = "malformed"


class AuthenticationError(DomainError):
    """Raised when the bearer credential is missing or invalid."""

    code = "unauthenticated"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"


class NotFoundError(DomainError):
    code = "not_found"


class NotEnrolledError(DomainError):
    code = "not_enrolled"


class SessionClosedError(DomainError):
    code = "session_closed"


class SessionExpiredError(DomainError):
    code = "session_expired"


class AlreadyMarkedError(DomainError):
    """Attendance for this (student, session) pair already exists."""

    code = "already_marked"


class DocumentExistsError(DomainError):
    """A batched insert hit a document id that another writer already took."""

    code = "conflict"


class TransientError(DomainError):
    """The document store timed out or is unavailable; the whole operation may be retried."""

    code = "transient"
