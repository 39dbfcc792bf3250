from __future__ import annotations

import logging
from typing import Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger("memory_backend.errors")


def error_response(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = {"error": error}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


def _allowed_origin(request: Request, allow_origins: Sequence[str]) -> str | None:
    origin = request.headers.get("origin")
    if not origin:
        return None
    if "*" in allow_origins:
        return "*"
    return origin if origin in allow_origins else None


def install_error_handlers(app: FastAPI, allow_origins: Sequence[str] = ("*",)) -> None:
    """Every failure leaves the service as a JSON body, never an HTML page."""

    @app.exception_handler(HTTPException)
    async def _http_error(_request: Request, exc: HTTPException) -> JSONResponse:
        detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(exc.status_code, detail)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
            for err in exc.errors()
        )
        return error_response(422, "Invalid request", messages)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = error_response(500, "Internal server error", str(exc) or exc.__class__.__name__)
        # Runs in ServerErrorMiddleware, outside CORSMiddleware.
        origin = _allowed_origin(request, allow_origins)
        if origin is not None:
            response.headers["Access-Control-Allow-Origin"] = origin
            if origin != "*":
                response.headers["Vary"] = "Origin"
        return response
