"""Marshmallow fields producing the API's plain-language validation messages."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

from marshmallow import fields

_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_string(value: str) -> str:
    """Trim and collapse internal whitespace runs to a single space."""
    return _WHITESPACE_RUN.sub(" ", value.strip())


class _LabelledField(fields.Field):
    """Field whose error messages are pre-rendered with a public ``label``."""

    def __init__(self, label: str, *, messages: dict[str, str], **kwargs: Any) -> None:
        self.label = label
        merged = {
            "required": f"{label} is required",
            "null": f"{label} is required",
            **messages,
        }
        merged.update(kwargs.pop("error_messages", None) or {})
        super().__init__(error_messages=merged, **kwargs)


class CleanString(_LabelledField):
    """String that is sanitized before its length is checked.

    :param blank_as_none: Map strings that are empty after sanitizing to ``None``
        (optional free-text columns).
    """

    def __init__(
        self,
        label: str,
        *,
        min_length: int | None = None,
        max_length: int | None = None,
        blank_as_none: bool = False,
        **kwargs: Any,
    ) -> None:
        self.min_length = min_length
        self.max_length = max_length
        self.blank_as_none = blank_as_none
        messages = {
            "invalid": f"{label} must be a string",
            "too_short": f"{label} must be at least {min_length} characters long",
            "too_long": f"{label} must be no more than {max_length} characters long",
        }
        if not kwargs.get("required"):
            messages["null"] = f"{label} must be a string"
        super().__init__(label, messages=messages, **kwargs)

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> str | None:
        if not isinstance(value, str):
            raise self.make_error("invalid")
        cleaned = sanitize_string(value)
        if not cleaned:
            if self.blank_as_none:
                return None
            if self.required:
                raise self.make_error("required")
        if self.min_length is not None and len(cleaned) < self.min_length:
            raise self.make_error("too_short")
        if self.max_length is not None and len(cleaned) > self.max_length:
            raise self.make_error("too_long")
        return cleaned


class BoundedInteger(_LabelledField):
    """Whole number within ``[minimum, maximum]``; numeric strings are accepted.

    Booleans are rejected even though Python treats them as integers.
    """

    def __init__(
        self,
        label: str,
        *,
        minimum: int,
        maximum: int,
        blank_as_none: bool = False,
        **kwargs: Any,
    ) -> None:
        self.minimum = minimum
        self.maximum = maximum
        self.blank_as_none = blank_as_none
        messages = {
            "invalid": f"{label} must be a valid number",
            "whole": f"{label} must be a whole number",
            "too_small": f"{label} must be at least {minimum}",
            "too_large": f"{label} must be no more than {maximum}",
        }
        if not kwargs.get("required"):
            messages["null"] = f"{label} must be a valid number"
        super().__init__(label, messages=messages, **kwargs)

    def _to_number(self, value: Any) -> float | int | None:
        if isinstance(value, bool):
            raise self.make_error("invalid")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return value
        if isinstance(value, str):
            text = value.strip()
            if not text:
                if self.blank_as_none:
                    return None
                raise self.make_error("invalid")
            try:
                return int(text)
            except ValueError:
                pass
            try:
                return float(text)
            except ValueError as exc:
                raise self.make_error("invalid") from exc
        raise self.make_error("invalid")

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> int | None:
        number = self._to_number(value)
        if number is None:
            return None
        if isinstance(number, float):
            if not math.isfinite(number):
                raise self.make_error("invalid")
            if not number.is_integer():
                raise self.make_error("whole")
            number = int(number)
        if number < self.minimum:
            raise self.make_error("too_small")
        if number > self.maximum:
            raise self.make_error("too_large")
        return number


class Choice(_LabelledField):
    """Case-insensitive string restricted to ``choices``; emits the lowercase value."""

    def __init__(
        self,
        label: str,
        *,
        choices: Iterable[str],
        choice_message: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.choices = tuple(choices)
        messages = {
            "invalid": f"{label} must be a string",
            "choice": choice_message or f"{label} must be one of: {', '.join(self.choices)}",
        }
        if not kwargs.get("required"):
            messages["null"] = f"{label} must be a string"
        super().__init__(label, messages=messages, **kwargs)

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> str:
        if not isinstance(value, str):
            raise self.make_error("invalid")
        normalized = value.strip().lower()
        if not normalized and self.required:
            raise self.make_error("required")
        if normalized not in self.choices:
            raise self.make_error("choice")
        return normalized


class Identifier(_LabelledField):
    """Opaque string id; blank ids read as ``None`` (no id)."""

    def __init__(self, label: str = "id", **kwargs: Any) -> None:
        messages = {"invalid": f"{label} must be a string", "null": f"{label} must be a string"}
        super().__init__(label, messages=messages, **kwargs)

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> str | None:
        if not isinstance(value, str):
            raise self.make_error("invalid")
        return value.strip() or None
