import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY, HTTP_500_INTERNAL_SERVER_ERROR

from app.core.errors import InfrastructureFailure

logger = logging.getLogger(__name__)

GENERIC_ERROR = {"error": "Internal server error"}


def _sanitize(obj):
    if isinstance(obj, (bytes, bytearray)):
        return f"<bytes:{len(obj)}>"
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items() if k != "ctx"}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(v) for v in obj]
    return obj


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """HTTPException(detail=...) → {"error": detail}"""
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Invalid request", "detail": _sanitize(exc.errors())},
    )


async def infrastructure_failure_handler(request: Request, exc: InfrastructureFailure):
    logger.error("Infrastructure failure during %s", exc.operation, exc_info=exc)
    return JSONResponse(status_code=HTTP_500_INTERNAL_SERVER_ERROR, content=GENERIC_ERROR)


async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled %s: %s", type(exc).__name__, exc, exc_info=exc)
    return JSONResponse(status_code=HTTP_500_INTERNAL_SERVER_ERROR, content=GENERIC_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InfrastructureFailure, infrastructure_failure_handler)
    app.add_exception_handler(Exception, general_exception_handler)
