"""HTTP errors and the single error envelope.

Every failed request answers with

    {"error": {"status": <int>, "message": <str>}}

and the same HTTP status. Handlers below cover explicit `HTTPException`s,
request validation failures, unknown routes and anything uncaught.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


def _debug(msg: str) -> None:
    print(f"[errors] {msg}")


def _default_message(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def http_error(status: int, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> HTTPException:
    return HTTPException(status_code=status, detail=message or _default_message(status), headers=headers)


def bad_request(message: Optional[str] = None) -> HTTPException:
    return http_error(400, message)


def unauthorized(message: Optional[str] = None) -> HTTPException:
    return http_error(401, message or "Unauthorized", headers={"WWW-Authenticate": "Bearer"})


def not_found(message: Optional[str] = None) -> HTTPException:
    return http_error(404, message)


def not_acceptable(message: Optional[str] = None) -> HTTPException:
    return http_error(406, message)


def conflict(message: Optional[str] = None) -> HTTPException:
    return http_error(409, message)


def unprocessable(message: Optional[str] = None) -> HTTPException:
    return http_error(422, message)


def error_body(status: int, message: Any) -> Dict[str, Any]:
    return {"error": {"status": int(status), "message": str(message)}}


def validation_message(exc: Any) -> str:
    """First validation error as a short human string (e.g. `"email" value is not a valid email`)."""
    try:
        errors = exc.errors()
    except Exception:
        return str(exc)
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    field = ".".join(loc)
    msg = str(first.get("msg") or "invalid")
    return f'"{field}" {msg}' if field else msg


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        status = int(exc.status_code or 500)
        message = exc.detail if exc.detail is not None else _default_message(status)
        return JSONResponse(
            status_code=status,
            content=error_body(status, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content=error_body(422, validation_message(exc)))

    @app.exception_handler(Exception)
    async def _unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        _debug(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        return JSONResponse(status_code=500, content=error_body(500, str(exc) or "Internal Server Error"))
