"""JSON logging for the API with per-request correlation ids.

Each request carries one id, taken from ``X-Request-ID`` or ``X-Correlation-ID``
when the client sends one and generated otherwise. It lives in the WSGI
environ of that request, is stamped on every log record emitted while the
request is handled, echoed in the ``X-Request-ID`` response header and
embedded in error bodies.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")
ENVIRON_KEY = "gym_buddy.request_id"

# Attributes every LogRecord has; anything else arrived through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_CONTEXT_ATTRS = ("request_id", "method", "path")


class JSONFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message, request context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_ATTRS:
            payload[key] = getattr(record, key, None)
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Attach request id, method and path to records logged during a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = current_request_id()
            record.method = request.method
            record.path = request.path
        else:
            record.request_id = record.method = record.path = None
        return True


def current_request_id() -> str | None:
    """Return the id of the request being handled, assigning it on first use.

    Outside a request there is nothing to correlate, so ``None`` is returned.
    """
    if not has_request_context():
        return None
    environ = request.environ
    request_id = environ.get(ENVIRON_KEY)
    if request_id is None:
        incoming = (request.headers.get(h, "").strip() for h in CORRELATION_HEADERS)
        request_id = next((value for value in incoming if value), None) or str(uuid4())
        environ[ENVIRON_KEY] = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Send the root logger to stdout as JSON at ``level``."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Assign the request id before handlers run and echo it on every response."""

    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _assign_request_id() -> None:
        current_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        request_id = current_request_id()
        if request_id:
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response


__all__ = ["configure_logging", "current_request_id", "init_app"]
