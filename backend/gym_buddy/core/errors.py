"""Centralized JSON error handling for the API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, current_app, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from gym_buddy.core.logger import current_request_id
from gym_buddy.services._shared.errors import ServiceError

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_error_body(
    *,
    code: str,
    message: str,
    details: Any = None,
) -> dict[str, Any]:
    """
    Build the JSON error envelope.

    :param code: Stable snake_case error category.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Dictionary with ``error``, ``message``, optional ``details`` and
        the correlation ``request_id``.
    :rtype: dict
    """
    body: dict[str, Any] = {"error": code, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = current_request_id()
    return body


def _error_response(
    body: dict[str, Any],
    status: int,
    headers: Mapping[str, str] | None = None,
) -> tuple[Response, int]:
    resp = jsonify(body)
    for name, value in (headers or {}).items():
        resp.headers[name] = value
    return resp, status


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case. Defaults to
        ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload (e.g., validation messages) included in the
        response body.
    headers : Mapping[str, str] | None, optional
        Extra response headers such as ``Retry-After``.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}
        self.headers = dict(headers or {})

    def to_body(self) -> dict[str, Any]:
        """Serialize error metadata into the JSON error envelope."""
        return _as_error_body(code=self.code, message=self.message, details=self.details or None)


# Domain conveniences
class BadRequest(APIError):
    """400 for malformed or invalid client input."""

    def __init__(
        self,
        message: str = "Bad request",
        *,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST, code=code, details=details)


class ValidationFailed(BadRequest):
    """400 carrying the aggregated field-level validation messages."""

    def __init__(self, errors: list[str], message: str = "Validation failed") -> None:
        super().__init__(message, code="validation_error", details={"errors": list(errors)})
        self.errors = list(errors)


class NotFound(APIError):
    """404 when resources are missing."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409 for uniqueness/constraint collisions."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class TooManyRequests(APIError):
    """429 once a client exhausts its rate-limit window."""

    def __init__(self, message: str = "Too many requests", *, retry_after: int = 0) -> None:
        super().__init__(
            message,
            status_code=HTTPStatus.TOO_MANY_REQUESTS,
            code="too_many_requests",
            headers={"Retry-After": str(max(int(retry_after), 0))},
        )
        self.retry_after = max(int(retry_after), 0)


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Every handled error renders ``{"error", "message", "details"?, "request_id"}``.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    - Internal errors expose ``original_error`` only when ``DEBUG`` is on.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        body = err.to_body()
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s request_id=%s",
            err.code,
            err.status_code,
            err.message,
            body.get("request_id"),
        )
        return _error_response(body, err.status_code, err.headers)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        from gym_buddy.services._shared.base import translate_service_error

        return handle_api_error(translate_service_error(err, debug=current_app.debug))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        # Werkzeug may provide HTML-ish description; normalize for clients
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        elif status == HTTPStatus.METHOD_NOT_ALLOWED and request:
            message = f"Method {request.method} not allowed on '{request.path}'"
        body = _as_error_body(code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            error_code,
            status,
            message,
            body.get("request_id"),
        )
        headers = {}
        if status == HTTPStatus.METHOD_NOT_ALLOWED and getattr(err, "valid_methods", None):
            headers["Allow"] = ", ".join(err.valid_methods)  # type: ignore[attr-defined]
        return _error_response(body, status, headers)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        from gym_buddy.schemas.common import flatten_messages

        errors = flatten_messages(err.messages)
        body = _as_error_body(
            code="validation_error",
            message="Validation failed",
            details={"errors": errors},
        )
        log.warning("ValidationError: request_id=%s", body.get("request_id"))
        return _error_response(body, HTTPStatus.BAD_REQUEST)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        body = _as_error_body(code="conflict", message="Resource conflict")
        log.error("IntegrityError: request_id=%s", body.get("request_id"), exc_info=True)
        return _error_response(body, HTTPStatus.CONFLICT)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        body = _as_error_body(
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        log.error("OperationalError: request_id=%s", body.get("request_id"), exc_info=True)
        return _error_response(body, HTTPStatus.SERVICE_UNAVAILABLE)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; details only in debug mode
        details = {"original_error": str(err)} if current_app.debug else None
        body = _as_error_body(
            code="internal_server_error",
            message="Internal server error",
            details=details,
        )
        log.error("Unhandled exception: request_id=%s", body.get("request_id"), exc_info=True)
        return _error_response(body, HTTPStatus.INTERNAL_SERVER_ERROR)


__all__ = [
    "APIError",
    "BadRequest",
    "Conflict",
    "NotFound",
    "TooManyRequests",
    "ValidationFailed",
    "init_app",
]
