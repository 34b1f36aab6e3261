# app/errors.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from sqlalchemy.exc import OperationalError, ProgrammingError

logger = logging.getLogger(__name__)

MIGRATION_HINT = "Database schema is out of date. Run `alembic upgrade head`."


class AppError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {"error": self.message, **self.extra}


class ValidationFailed(AppError):
    """Field-level input errors, rendered as 422 with `issues`."""

    status_code = 422

    def __init__(self, field_errors: dict[str, list[str]], form_errors: list[str] | None = None) -> None:
        super().__init__(
            "Validation failed",
            issues={"fieldErrors": field_errors, "formErrors": form_errors or []},
        )
        self.field_errors = field_errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls({field: [message]})


class InvalidReference(AppError):
    # e.g. weekly entry for a hidden / removed / unknown driver
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT


# ---------- handlers ----------

def _app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


def _http_error(request: Request, exc: HTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def _request_validation(request: Request, exc: RequestValidationError):
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field_errors.setdefault(".".join(loc) or "_", []).append(err.get("msg", "Invalid value"))
    return JSONResponse(
        {"error": "Validation failed", "issues": {"fieldErrors": field_errors, "formErrors": []}},
        status_code=422,
    )


# SQLite reports a missing table/column as OperationalError; locks and
# connection failures share that class and must not get the migration hint
_MISSING_SCHEMA = ("no such table", "no such column", "has no column named")


def is_schema_mismatch(exc: Exception) -> bool:
    if isinstance(exc, ProgrammingError):
        return True
    if isinstance(exc, OperationalError):
        message = str(getattr(exc, "orig", exc)).lower()
        return any(m in message for m in _MISSING_SCHEMA)
    return False


def _database_error(request: Request, exc: Exception):
    if not is_schema_mismatch(exc):
        return _unexpected(request, exc)
    logger.error("database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        {"error": MIGRATION_HINT, "details": str(getattr(exc, "orig", exc)), "needsMigration": True},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _unexpected(request: Request, exc: Exception):
    logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        {"error": str(exc) or exc.__class__.__name__},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error)
    app.add_exception_handler(HTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(OperationalError, _database_error)
    app.add_exception_handler(ProgrammingError, _database_error)
    app.add_exception_handler(Exception, _unexpected)
