"""Map core error categories to HTTP responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from nexus.errors import Conflict, Forbidden, NexusError, NotFound, RuleViolation, ValidationFailed

logger = logging.getLogger("nexus.http")

STATUS_CODES = {
    NotFound: 404,
    ValidationFailed: 400,
    Conflict: 409,
    RuleViolation: 422,
    Forbidden: 403,
}


def status_code_for(exc: NexusError) -> int:
    for category, code in STATUS_CODES.items():
        if isinstance(exc, category):
            return code
    return 400


async def nexus_error_handler(request: Request, exc: NexusError) -> JSONResponse:
    code = status_code_for(exc)
    logger.info("%s %s -> %d %s: %s", request.method, request.url.path, code, type(exc).__name__, exc.message)
    return JSONResponse(
        status_code=code,
        content={"success": False, "error": exc.message, "category": exc.category},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NexusError, nexus_error_handler)
