"""Error rendering and global exception handlers.

The request router converts errors into responses itself; the handlers here
cover whatever is raised outside of it (unknown methods, framework errors) so
that every error response shares the same flat JSON shape:

    {"error": "<title>", "message": "<detail>", ...details}
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from weather_edge.core.errors import (
    AppError,
    MethodNotAllowedAppError,
    NotFoundAppError,
    UnclassifiedAppError,
)
from weather_edge.core.logging import get_request_id

logger = logging.getLogger(__name__)


def render_app_error(exc: AppError) -> JSONResponse:
    """Build the JSON response for a domain error.

    Args:
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the error's status code, body and extra headers.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
        headers=exc.headers() or None,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors raised outside the router."""
    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": exc.status_code,
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )
    return render_app_error(exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404/405 from routing) as JSON errors."""
    if exc.status_code == 404:
        app_error: AppError = NotFoundAppError(code="not_found", message=str(exc.detail))
    elif exc.status_code == 405:
        app_error = MethodNotAllowedAppError(
            code="method_not_allowed",
            message=f"Method {request.method} is not allowed",
        )
    else:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    logger.info(
        "http_error_handled",
        extra={
            "status_code": exc.status_code,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    response = render_app_error(app_error)
    # Starlette sets Allow on 405 responses
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse 500 with ``{error, message}``.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )
    return render_app_error(UnclassifiedAppError(code="internal_error", message=str(exc)))


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
