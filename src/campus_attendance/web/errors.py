from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AlreadyMarkedError,
    AuthenticationError,
    AuthorizationError,
    DocumentExistsError,
    DomainError,
    MalformedPayloadError,
    NotEnrolledError,
    NotFoundError,
    SessionClosedError,
    SessionExpiredError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: MalformedPayloadError is also a ValidationError.
_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (MalformedPayloadError, 400),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotEnrolledError, 403),
    (NotFoundError, 404),
    (AlreadyMarkedError, 409),
    (DocumentExistsError, 409),
    (SessionClosedError, 410),
    (SessionExpiredError, 410),
    (TransientError, 503),
]

TRANSIENT_RETRY_AFTER_SECONDS = 2


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        body = {"error": str(e) or "Request failed", "code": e.code}
        response = jsonify(body)
        response.status_code = status
        if isinstance(e, TransientError):
            logger.warning("transient store failure on %s %s: %s", request.method, request.path, e)
            response.headers["Retry-After"] = str(TRANSIENT_RETRY_AFTER_SECONDS)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if request.path.startswith("/api/"):
            message = "API endpoint not found" if e.code == 404 else e.description
            return jsonify({"error": message, "code": e.name.lower().replace(" ", "_")}), e.code
        return e

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        body = {"error": "Internal server error"}
        if app.config.get("DEBUG"):
            body["message"] = str(e)
        return jsonify(body), 500
