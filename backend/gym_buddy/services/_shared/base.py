# gym_buddy/services/_shared/base.py
from __future__ import annotations

import logging

from gym_buddy.core import errors as api_errors
from gym_buddy.repositories.base import Pagination
from gym_buddy.services._shared.errors import (
    ConstraintError,
    InternalError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from gym_buddy.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

log = logging.getLogger(__name__)


def translate_service_error(exc: ServiceError, *, debug: bool = False) -> api_errors.APIError:
    """
    Map a service-level error to its HTTP counterpart.

    :param exc: Error raised inside a service or repository.
    :type exc: ServiceError
    :param debug: Expose the underlying cause of an :class:`InternalError`.
    :returns: API error carrying the status code and client-safe message.
    :rtype: APIError
    """
    if isinstance(exc, ValidationError):
        # → 400 with every collected message
        return api_errors.ValidationFailed(exc.messages)

    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(f"{exc.entity} with id {exc.key} not found")

    if isinstance(exc, ConstraintError):
        if exc.kind == "duplicate":
            return api_errors.Conflict(exc.detail)
        return api_errors.BadRequest(exc.detail, code="constraint_violation")

    if isinstance(exc, InternalError):
        cause = exc.original or exc
        return api_errors.APIError(
            message="Internal server error",
            status_code=500,
            code="internal_server_error",
            details={"original_error": str(cause)} if debug else None,
        )

    return api_errors.BadRequest(str(exc))


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer pagination clamping shared by list queries.

    Notes
    -----
    - Services never touch the global session; they always go through a Unit of Work.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(self, *, page: int, limit: int, max_limit: int = 100) -> Pagination:
        """
        Build a Pagination value object with basic clamping.

        :param page: 1-based page number.
        :param limit: Requested page size, clamped to ``[1, max_limit]``.
        :param max_limit: Upper bound for ``limit``.
        :rtype: Pagination
        """
        page = max(1, int(page))
        limit = min(max(1, int(limit)), max_limit)
        return Pagination(page=page, limit=limit)

