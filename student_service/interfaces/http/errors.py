from http import HTTPStatus

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .schemas import FIELD_MESSAGES

logger = structlog.get_logger()


def error_body(error: str, message: str) -> dict:
    return {"error": error, "message": message}


def _field_of(loc) -> str:
    # ("body", "gpa") -> "gpa"; ("query", "match") -> "match"
    parts = [p for p in loc if isinstance(p, str) and p not in ("body", "query", "path")]
    return parts[0] if parts else ""


def validation_details(exc: RequestValidationError) -> list[dict]:
    details = []
    seen = set()
    for err in exc.errors():
        field = _field_of(err.get("loc", ()))
        message = FIELD_MESSAGES.get(field, err.get("msg", "Invalid value"))
        if (field, message) in seen:
            continue
        seen.add((field, message))
        details.append({"field": field, "message": message})
    return details


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = validation_details(exc)
    logger.info("validation_failed", path=request.url.path, fields=[d["field"] for d in details])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = error_body(HTTPStatus(exc.status_code).phrase, str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception):
    # the cause stays in the server log
    logger.exception("unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", "An unexpected error occurred while processing the request"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
