"""Error translation at the outer edge of the application.

The middleware encloses the authentication middleware, so token failures
raised before routing come out as the same JSON envelope as errors raised by
route handlers (which the exception handlers below catch first). Routing
failures (unknown path, wrong method) are mapped to their own kinds.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from planner_auth.core.errors import (
    AuthServiceError,
    InvalidRequestError,
    MethodNotAllowedError,
    NotFoundError,
    translate_error,
)

HTTP_STATUS_ERRORS: dict[int, type[AuthServiceError]] = {
    status.HTTP_404_NOT_FOUND: NotFoundError,
    status.HTTP_405_METHOD_NOT_ALLOWED: MethodNotAllowedError,
}


class ErrorTranslatorMiddleware(BaseHTTPMiddleware):
    """Turns any exception escaping the inner stack into the uniform error envelope."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return translate_error(exc)


def http_exception_to_error(exc: StarletteHTTPException) -> AuthServiceError:
    """Framework HTTP errors as error kinds: 404 and 405 by name, other 4xx as InvalidRequest."""
    error_cls = HTTP_STATUS_ERRORS.get(exc.status_code)
    if error_cls is not None:
        return error_cls()
    if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        return InvalidRequestError()
    return AuthServiceError(f"HTTP {exc.status_code}")


async def _handle_service_error(request: Request, exc: AuthServiceError) -> JSONResponse:
    return translate_error(exc)


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return translate_error(InvalidRequestError())


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return translate_error(http_exception_to_error(exc))


def install_error_translation(app: FastAPI) -> None:
    """
    Register the translator. Call after adding the authentication middleware:
    middleware added later wraps middleware added earlier.
    """
    app.add_exception_handler(AuthServiceError, _handle_service_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_middleware(ErrorTranslatorMiddleware)
