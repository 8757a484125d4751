"""Unit tests for JSON log formatting and request correlation."""

from __future__ import annotations

import json
import logging

import pytest
from gym_buddy.core.logger import ENVIRON_KEY, JSONFormatter, RequestContextFilter, current_request_id


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="gym_buddy.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Workout %s",
        args=("updated",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_renders_message_and_extras(self):
        record = _record(workout_id="w1", exercises_created=2, reconcile_mode="replace")

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "Workout updated"
        assert payload["level"] == "INFO"
        assert payload["workout_id"] == "w1"
        assert payload["exercises_created"] == 2
        assert payload["reconcile_mode"] == "replace"

    def test_standard_record_attributes_are_not_repeated(self):
        payload = json.loads(JSONFormatter().format(_record()))

        assert not {"args", "msg", "lineno", "created", "pathname"} & set(payload)

    def test_context_is_empty_outside_requests(self):
        record = _record()
        RequestContextFilter().filter(record)

        payload = json.loads(JSONFormatter().format(record))
        assert (payload["request_id"], payload["method"], payload["path"]) == (None, None, None)

    def test_context_is_filled_inside_requests(self, app):
        record = _record()
        with app.test_request_context("/api/v1/workouts", method="POST", headers={"X-Request-ID": "r-1"}):
            RequestContextFilter().filter(record)

        assert (record.request_id, record.method, record.path) == ("r-1", "POST", "/api/v1/workouts")


class TestRequestId:
    def test_none_outside_requests(self):
        assert current_request_id() is None

    @pytest.mark.parametrize("header", ["X-Request-ID", "X-Correlation-ID"])
    def test_reuses_incoming_header(self, app, header):
        with app.test_request_context(headers={header: "abc-123"}):
            assert current_request_id() == "abc-123"
            assert current_request_id() == "abc-123"

    def test_blank_header_gets_generated_id(self, app):
        with app.test_request_context(headers={"X-Request-ID": "  "}):
            assert current_request_id().strip()

    def test_generates_one_per_request(self, app):
        with app.test_request_context() as ctx:
            first = current_request_id()
            assert first == ctx.request.environ[ENVIRON_KEY]

        with app.test_request_context():
            assert current_request_id() != first

    def test_ids_do_not_leak_between_client_requests(self, app, client):
        # The session fixtures keep an app context pushed across requests
        with app.app_context():
            first = client.get("/api/v1/health", headers={"X-Request-ID": "first"})
            second = client.get("/api/v1/health")

        assert first.headers["X-Request-ID"] == "first"
        assert second.headers["X-Request-ID"] not in ("", "first")
