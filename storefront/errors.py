"""
Domain errors and their HTTP mapping.

Every error raised by the service layer is a StorefrontError; the handlers
installed by install_error_handlers() turn them into
{"success": false, "error": ...} responses.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

log = logging.getLogger(__name__)


class StorefrontError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredentials(StorefrontError):
    status_code = 400
    default_message = "Username and password are required"


class InvalidCredentials(StorefrontError):
    status_code = 401
    default_message = "Invalid username or password"


class MissingToken(StorefrontError):
    status_code = 401
    default_message = "No admin token provided"


class InvalidOrExpiredToken(StorefrontError):
    status_code = 401
    default_message = "Invalid or expired token"


class NotAdmin(StorefrontError):
    status_code = 403
    default_message = "Invalid admin token"


class Forbidden(StorefrontError):
    status_code = 403
    default_message = "Insufficient permissions"


class LastAdminProtected(StorefrontError):
    status_code = 400
    default_message = "Cannot remove the last active admin"


class NotFound(StorefrontError):
    status_code = 404
    default_message = "Not found"


class Conflict(StorefrontError):
    status_code = 400
    default_message = "Already exists"


class ValidationFailed(StorefrontError):
    status_code = 400
    default_message = "Invalid data"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def _storefront_error(request: Request, exc: StorefrontError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message},
        )

    @app.exception_handler(OperationalError)
    async def _database_unavailable(request: Request, exc: OperationalError):
        log.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "Database unavailable"},
        )
