"""
Application errors and their HTTP rendering.

Services raise `ApiError`; the handler registered by
`register_exception_handlers` turns it into a JSON body of the form
`{"error": "..."}` or `{"message": "..."}` depending on `key`.

Cookies issued while resolving dependencies are normally merged into the
endpoint's response by FastAPI, which does not happen when the endpoint
raises. `defer_cookie` records them on the request so every handler below
writes them onto the error response as well.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

_PENDING_COOKIES = "pending_cookies"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, *, key: str = "error") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.key = key


def unauthorized(message: str) -> ApiError:
    return ApiError(status.HTTP_401_UNAUTHORIZED, message, key="message")


def bad_request(message: str, *, key: str = "error") -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, message, key=key)


def not_found(message: str, *, key: str = "error") -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, message, key=key)


def server_error(message: str) -> ApiError:
    return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def defer_cookie(request: Request, params: dict[str, Any]) -> None:
    """Remember `Response.set_cookie` keyword arguments for error responses."""
    pending = getattr(request.state, _PENDING_COOKIES, None)
    if pending is None:
        pending = []
        setattr(request.state, _PENDING_COOKIES, pending)
    pending.append(params)


def apply_pending_cookies(request: Request, response: Response) -> Response:
    for params in getattr(request.state, _PENDING_COOKIES, ()):
        response.set_cookie(**params)
    return response


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    response = JSONResponse(status_code=exc.status_code, content={exc.key: exc.message})
    return apply_pending_cookies(request, response)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    response = await request_validation_exception_handler(request, exc)
    return apply_pending_cookies(request, response)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Starlette's ServerErrorMiddleware re-raises after this response is sent
    # and the ASGI server logs the traceback.
    response = JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Error interno del servidor"},
    )
    return apply_pending_cookies(request, response)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
