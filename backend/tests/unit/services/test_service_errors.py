"""Mapping of service-layer errors onto API errors."""

from __future__ import annotations

import pytest
from gym_buddy.services._shared.base import translate_service_error
from gym_buddy.services._shared.errors import (
    ConstraintError,
    InternalError,
    NotFoundError,
    ServiceError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("error", "status", "code", "message"),
    [
        (ValidationError(["name is required"]), 400, "validation_error", "Validation failed"),
        (NotFoundError("Workout", "w-9"), 404, "not_found", "Workout with id w-9 not found"),
        (ConstraintError("Exercise", "dup", "duplicate"), 409, "conflict", "dup"),
        (ConstraintError("Exercise", "bad ref", "foreign_key"), 400, "constraint_violation", "bad ref"),
        (InternalError(), 500, "internal_server_error", "Internal server error"),
        (ServiceError("odd"), 400, "bad_request", "odd"),
    ],
)
def test_status_code_and_message(error, status, code, message):
    api_error = translate_service_error(error)

    assert (api_error.status_code, api_error.code, api_error.message) == (status, code, message)


def test_validation_messages_are_carried():
    api_error = translate_service_error(ValidationError(["a", "b"]))

    assert api_error.details == {"errors": ["a", "b"]}


def test_internal_error_cause_is_hidden_unless_debugging():
    error = InternalError(original=RuntimeError("disk full"))

    assert translate_service_error(error).details == {}
    assert translate_service_error(error, debug=True).details == {"original_error": "disk full"}
