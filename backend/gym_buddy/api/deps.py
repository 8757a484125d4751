"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request

from gym_buddy.core.errors import BadRequest, ValidationFailed
from gym_buddy.schemas.common import Invalid
from gym_buddy.schemas.workout import parse_filters
from gym_buddy.services.workouts.dto import WorkoutListIn

F = TypeVar("F", bound=Callable[..., Any])

INVALID_JSON_MESSAGE = "Invalid JSON in request body"


def read_json_body() -> Any:
    """Decode the request body as JSON regardless of ``Content-Type``.

    An empty body decodes to ``None``.

    :raises BadRequest: When the body is not valid JSON.
    """

    if not request.get_data(cache=True):
        return None
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        raise BadRequest(INVALID_JSON_MESSAGE)
    return payload


def parse_list_query() -> WorkoutListIn:
    """Parse list filters from ``request.args`` with configured page-size limits."""

    result = parse_filters(
        request.args,
        default_limit=int(current_app.config.get("PAGINATION_DEFAULT_LIMIT", 20)),
        max_limit=int(current_app.config.get("PAGINATION_MAX_LIMIT", 100)),
    )
    if isinstance(result, Invalid):
        raise ValidationFailed(result.errors)
    return result.value


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def empty_response(status: int = 204) -> Response:
    return Response(status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={
                    "endpoint": getattr(request, "endpoint", None),
                    "elapsed_ms": round(elapsed_ms, 2),
                },
            )

    return wrapper  # type: ignore[return-value]
