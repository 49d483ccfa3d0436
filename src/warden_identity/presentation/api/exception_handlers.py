"""Exception handlers mapping AuthError onto JSON responses.

Error Response Format:
    {
        "detail": "Human-readable error message",
        "code": "MACHINE_READABLE_ERROR_CODE",
        "details": {...}  # only when present
    }

Usage:
    from warden_identity.presentation.api.exception_handlers import (
        setup_exception_handlers,
    )

    app = FastAPI()
    setup_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from warden_identity.exceptions import AuthError

logger = logging.getLogger(__name__)


def _create_error_response(exc: AuthError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the AuthError handler on the FastAPI application.

    Parameters
    ----------
    app
        The FastAPI application instance
    """

    @app.exception_handler(AuthError)
    async def auth_exception_handler(
        request: Request,
        exc: AuthError,
    ) -> JSONResponse:
        """Handle every identity error with its hinted status and stable code."""
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Identity failure on %s %s: %s (code=%s)",
                request.method,
                request.url.path,
                exc.message,
                exc.code.value,
            )
        else:
            logger.info(
                "Identity error on %s %s: %s (code=%s)",
                request.method,
                request.url.path,
                exc.message,
                exc.code.value,
            )

        return _create_error_response(exc)
