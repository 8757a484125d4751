"""Common Marshmallow schemas and result types shared across resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from marshmallow import EXCLUDE, Schema, fields, post_load

from .fields import BoundedInteger

T = TypeVar("T")

# Upper bound accepted for raw ``page``/``limit`` before clamping
_QUERY_INT_CEILING = 1_000_000


@dataclass(frozen=True, slots=True)
class Valid(Generic[T]):
    """Successful validation carrying the sanitized value."""

    value: T


@dataclass(frozen=True, slots=True)
class Invalid:
    """Failed validation carrying every human-readable message."""

    errors: list[str] = field(default_factory=list)


ValidationResult = Valid[T] | Invalid


class PaginationQuerySchema(Schema):
    """Validate ``page``/``limit`` query parameters with configurable defaults.

    ``page`` must be ``>= 1``; ``limit`` is clamped to ``[1, max_limit]``.
    """

    class Meta:
        unknown = EXCLUDE

    def __init__(self, *, default_limit: int = 20, max_limit: int = 100, **kwargs: Any) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    page = BoundedInteger("page", minimum=1, maximum=_QUERY_INT_CEILING, load_default=1)
    limit = BoundedInteger(
        "limit", minimum=-_QUERY_INT_CEILING, maximum=_QUERY_INT_CEILING, load_default=None
    )

    @post_load
    def apply_defaults(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        limit = data.get("limit")
        if limit is None:
            limit = self._default_limit
        data["limit"] = min(max(int(limit), 1), self._max_limit)
        data["page"] = data.get("page") or 1
        return data


class PaginationMetaSchema(Schema):
    """Pagination block for list responses."""

    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total = fields.Integer(required=True)
    total_pages = fields.Integer(required=True, data_key="totalPages")


def build_pagination(*, total: int, page: int, limit: int) -> dict[str, int]:
    """Return the ``pagination`` mapping for list responses."""
    pages = (int(total) + int(limit) - 1) // int(limit) if limit else 0
    return PaginationMetaSchema().dump(
        {"page": int(page), "limit": int(limit), "total": int(total), "total_pages": pages}
    )


def flatten_messages(messages: Any, prefix: str = "") -> list[str]:
    """Flatten marshmallow's nested ``messages`` structure into plain strings."""
    if isinstance(messages, str):
        return [f"{prefix}{messages}"]
    if isinstance(messages, dict):
        flat: list[str] = []
        for value in messages.values():
            flat.extend(flatten_messages(value, prefix))
        return flat
    if isinstance(messages, (list, tuple)):
        flat = []
        for value in messages:
            flat.extend(flatten_messages(value, prefix))
        return flat
    return [f"{prefix}{messages}"]
