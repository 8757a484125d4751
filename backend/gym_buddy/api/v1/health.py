"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from gym_buddy.api.deps import json_response, timing
from gym_buddy.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report liveness plus database reachability."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db.session.rollback()
        db_status = "fail"
    payload = {
        "status": "ok",
        "db": db_status,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload)
