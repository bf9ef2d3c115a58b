"""Problem+JSON utilities and global exception handlers.

Defines the RFC 7807 media type and handler callables that produce
application/problem+json responses. 304 Not Modified is rendered without a
body but keeps its validator headers.
"""

from __future__ import annotations

import logging
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from conditional_http.errors import InvalidArgumentError, UnsupportedPreconditionError
from conditional_http.http.error_mapping import PRECONDITION_ERROR_MAP

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def _exception_headers(exc: HTTPException) -> dict[str, str]:
    exc_headers = getattr(exc, "headers", None)
    if isinstance(exc_headers, dict):
        return {str(k): str(v) for k, v in exc_headers.items()}
    return {}


async def handle_http_exception(request: Request, exc: HTTPException) -> Response:  # noqa: D401
    status_code = int(getattr(exc, "status_code", 500) or 500)
    headers = _exception_headers(exc)
    if status_code == 304:
        return Response(status_code=304, headers=headers or None)
    if isinstance(getattr(exc, "detail", None), dict):
        detail = exc.detail
    else:
        detail = {"title": "Error", "status": status_code, "detail": str(getattr(exc, "detail", ""))}
    return JSONResponse(detail, status_code=status_code, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "errors": list(exc.errors()),
    }
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unsupported_precondition(request: Request, exc: UnsupportedPreconditionError) -> JSONResponse:  # noqa: D401
    logger.info("precondition.unsupported", extra={"method": request.method, "path": request.url.path})
    mapping = PRECONDITION_ERROR_MAP["wildcard_unsupported"]
    problem = {
        "title": mapping["title"],
        "status": mapping["status"],
        "detail": str(exc),
        "code": mapping["code"],
    }
    return JSONResponse(problem, status_code=int(mapping["status"]), media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error", exc_info=exc)
    return JSONResponse({"title": "Internal Server Error", "status": 500}, status_code=500, media_type=PROBLEM_MEDIA_TYPE)


def install_problem_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(UnsupportedPreconditionError, handle_unsupported_precondition)
    # Caller bugs (blank method, missing descriptor) are server faults
    app.add_exception_handler(InvalidArgumentError, handle_unexpected_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unsupported_precondition",
    "handle_unexpected_error",
    "install_problem_handlers",
]
