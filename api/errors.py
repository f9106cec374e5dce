from flask import jsonify, current_app, request
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging
import traceback

from models.db_storage import RecordNotFoundError
from models.schemas.common import flatten_errors
from utils.errors import AppError

logger = logging.getLogger(__name__)


def _debug() -> bool:
    return bool(current_app and current_app.debug)


def error_response(message: str, status: int, errors: list | None = None, details: dict | None = None):
    payload = {"success": False, "message": message}
    if errors:
        payload["errors"] = errors
    if details and _debug():
        payload.update(details)
    return jsonify(payload), status


def _unique_field(message: str) -> str:
    # sqlite: "UNIQUE constraint failed: users.email"
    # postgres: 'duplicate key value violates unique constraint "ix_users_email"' ... Key (email)=
    if "Key (" in message:
        return message.split("Key (", 1)[1].split(")", 1)[0]
    if "failed:" in message:
        column = message.split("failed:", 1)[1].strip().split(",")[0]
        return column.split(".")[-1]
    return "field"


def register_error_handlers(app):
    # Typed service errors carry their own status
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        logger.error("%s %s -> %s: %s", request.method, request.path, err.status_code, err.message)
        return error_response(
            err.message, err.status_code, details={"stack": traceback.format_exc()}
        )

    # marshmallow validation errors map to 400 with per-field messages
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("Validation failed", 400, errors=flatten_errors(err.messages))

    @app.errorhandler(RecordNotFoundError)
    def handle_record_not_found(err: RecordNotFoundError):
        logger.error("Record not found: %s", err)
        return error_response("Record not found", 400, details={"error": str(err)})

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        logger.error("Integrity error: %s", message)
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            field = _unique_field(message)
            return error_response(
                f"A record with this {field} already exists", 409, details={"error": message}
            )
        if "foreign key" in lower_msg:
            return error_response(
                "Invalid reference to related record", 400, details={"error": message}
            )
        return error_response("Invalid data provided", 400, details={"error": message})

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(err: SQLAlchemyError):
        logger.exception("Database error", exc_info=err)
        return error_response(
            "Database error occurred", 400, details={"error": str(err), "code": getattr(err, "code", None)}
        )

    @app.errorhandler(429)
    def too_many_requests(e):
        logger.warning("Rate limit exceeded for %s: %s", request.remote_addr, e.description)
        return error_response("Too many requests from this IP, please try again later.", 429)

    # 404 for unknown routes
    @app.errorhandler(404)
    def not_found(e):
        return error_response(f"Route {request.path} not found", 404)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.description or err.name, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response(
            "Internal server error",
            500,
            details={"error": str(err), "stack": traceback.format_exc()},
        )
