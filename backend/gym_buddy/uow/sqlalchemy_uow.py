"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from gym_buddy.core.extensions import db
from gym_buddy.repositories import (
    CompletionRepository,
    ExerciseRepository,
    WorkoutRepository,
)
from gym_buddy.uow.base import UnitOfWork

# Dialects that accept SET TRANSACTION directives
_SET_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.workouts = WorkoutRepository(session=self.session)
        self.exercises = ExerciseRepository(session=self.session)
        self.completions = CompletionRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Commits when the block exits cleanly; any exception (including one raised
    by the commit itself) rolls back every write made through the repositories.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


# Marker stored in ``Session.info`` / ``Connection.info`` while a read-only UoW is open
READ_ONLY_KEY = "gym_buddy.read_only"

_WRITE_PREFIXES = (
    "insert",
    "update",
    "delete",
    "merge",
    "alter",
    "drop",
    "truncate",
    "create",
    "replace",
)


@event.listens_for(Session, "before_flush")
def _block_readonly_flush(session, flush_context, instances) -> None:
    if session.info.get(READ_ONLY_KEY) and (session.new or session.dirty or session.deleted):
        raise RuntimeError(
            "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
        )


@event.listens_for(Engine, "before_cursor_execute")
def _block_readonly_statement(conn, cursor, statement, parameters, context, executemany) -> None:
    if not conn.info.get(READ_ONLY_KEY):
        return
    first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
    if first_token.startswith(_WRITE_PREFIXES):
        raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}")


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Sets the isolation level and ``READ ONLY`` on dialects that support it.
    - Flags the session and its connection so the module-level guards reject
      ORM flushes and DML/DDL statements, on every backend.
    - Always rolls back a transaction it owns and disallows ``commit()``.

    Parameters
    ----------
    isolation_level:
        Optional transaction isolation hint such as ``"READ COMMITTED"``.
    enforce_db_readonly:
        If ``True`` (default), applies ``SET TRANSACTION READ ONLY`` when supported.

    Notes
    -----
    When the session is already inside a transaction (e.g. an outer test
    fixture) the UoW attaches to it without issuing any ``SET TRANSACTION``.
    """

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly

        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        self._conn = None

        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Session already in a transaction: attach instead of owning one.
            pass

        self._conn = self.session.connection()
        dialect = self._conn.dialect.name

        if self._txn_ctx is not None and dialect in _SET_TRANSACTION_DIALECTS:
            try:
                if self.isolation_level:
                    iso = self.isolation_level.upper().strip()
                    self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
                if self.enforce_db_readonly:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
            except SQLAlchemyError as exc:
                current_app.logger.warning(
                    "SET TRANSACTION directives failed (%s). Falling back to guards-only.", exc
                )

        self._set_guards(True)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self._set_guards(False)
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._conn = None

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _set_guards(self, enabled: bool) -> None:
        targets = [self.session.info]
        if self._conn is not None:
            targets.append(self._conn.info)
        for info in targets:
            if enabled:
                info[READ_ONLY_KEY] = True
            else:
                info.pop(READ_ONLY_KEY, None)
