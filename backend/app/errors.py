# backend/app/errors.py
"""
Unified error envelope.

Every error response is a problem document:
    {"type", "title", "status", "detail", "instance", "code"?, "errors"?}

Domain exceptions carry their own status and machine-readable code; plain
HTTPExceptions raised by dependencies (auth, path validation) are wrapped the
same way so clients only ever parse one shape.
"""

from http import HTTPStatus
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.exceptions import DomainException

logger = logging.getLogger(__name__)


def _title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def problem_document(
    status_code: int,
    request: Request,
    detail: Optional[str] = None,
    code: Optional[str] = None,
    errors: Any = None,
) -> Dict[str, Any]:
    problem: Dict[str, Any] = {
        "type": "about:blank",
        "title": _title(status_code),
        "status": status_code,
        "detail": detail or "",
        "instance": request.url.path,
    }
    if code:
        problem["code"] = code
    if errors:
        problem["errors"] = jsonable_encoder(errors)
    return problem


def _split_http_detail(detail: Any) -> tuple[Optional[str], Optional[str], Any]:
    """Pull (message, code, errors) out of an HTTPException detail payload."""
    if isinstance(detail, dict):
        code = detail.get("code")
        message = detail.get("message") or detail.get("detail")
        return (
            message if isinstance(message, str) else None,
            code if isinstance(code, str) else None,
            detail.get("details") or detail.get("errors"),
        )
    if detail is None:
        return None, None, None
    return str(detail), None, None


def register_error_handlers(app: FastAPI) -> None:
    media_type = "application/problem+json" if settings.strict_schemas else "application/json"

    def respond(problem: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        return JSONResponse(
            problem, status_code=problem["status"], media_type=media_type, headers=headers
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail, code, errors = _split_http_detail(exc.detail)
        return respond(
            problem_document(exc.status_code, request, detail, code, errors),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        return respond(problem_document(exc.status_code, request, exc.message, exc.code, exc.details))

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return respond(
            problem_document(
                422, request, "Request validation failed", "validation_error", exc.errors()
            )
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return respond(
            problem_document(500, request, "Internal Server Error", "internal_server_error")
        )
