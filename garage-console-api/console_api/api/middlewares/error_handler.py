# console_api/api/middlewares/error_handler.py
import logging

from flask import Flask
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from console_api.api.responder import failure
from console_api.config.settings import settings
from console_api.core.exceptions import AppError

logger = logging.getLogger(__name__)


def _describe_validation_error(err: PydanticValidationError) -> str:
    first = err.errors()[0] if err.errors() else None
    if not first:
        return "Invalid request"
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if err.status_code >= 500:
            logger.error("Application error: %s", err.message)
        return failure(err.message, status=err.status_code)

    @app.errorhandler(PydanticValidationError)
    def handle_validation_error(err: PydanticValidationError):
        return failure(_describe_validation_error(err), status=400)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return failure(err.description or err.name, status=err.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        logger.exception("Unhandled error")

        if settings.debug:
            return failure(str(err), status=500)

        return failure("Internal server error", status=500)
