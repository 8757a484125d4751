# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Output pagination metadata.

    :param page: Current page (1-based).
    :type page: int
    :param limit: Page size.
    :type limit: int
    :param total: Total rows available.
    :type total: int
    :param total_pages: ``ceil(total / limit)``; ``0`` when nothing matched.
    :type total_pages: int
    """

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> PageMeta:
        pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(page=page, limit=limit, total=total, total_pages=pages)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
