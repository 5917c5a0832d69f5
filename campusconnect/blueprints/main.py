"""Service endpoints that sit outside the API surface."""
import logging

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from campusconnect.extensions import db

log = logging.getLogger(__name__)
main_bp = Blueprint("main", __name__)


@main_bp.route("/healthz")
def healthz():
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.exception("Health check could not reach the database")
        db.session.rollback()
        return jsonify(status="degraded", database="unreachable"), 503
    return jsonify(status="ok", database="ok")
