from typing import Callable
import logging

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "Application Error"
FALLBACK_MESSAGE = "Something went wrong while loading the application."


class ErrorFallbackMiddleware(BaseHTTPMiddleware):
    """
    Last line of defence for errors no exception handler claimed.

    The error is logged and the browser gets a static fallback; there is
    no retry affordance.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"title": FALLBACK_TITLE, "detail": FALLBACK_MESSAGE},
            )


def add_middleware(app: FastAPI) -> None:
    """Add all middleware to the FastAPI application."""
    app.add_middleware(ErrorFallbackMiddleware)
