from typing import Any, Dict, Optional
import logging

import httpx
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from motoshop.api.api import api_router
from motoshop.core.config import Settings, check_backend_config, settings
from motoshop.core.errors import (
    ConfirmationRequired,
    FormBusyError,
    FormValidationError,
    GatewayError,
    InvalidTransition,
    NotAuthenticated,
    NotFoundError,
)
from motoshop.core.middleware import add_middleware
from motoshop.db.session import SessionLocal
from motoshop.gateway import create_backend
from motoshop.services.workspace import WorkspaceRegistry

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _error_body(request: Request, detail: str, **extra: Any) -> Dict[str, Any]:
    """Error payload; includes the screen state when the request had a workspace."""
    body: Dict[str, Any] = {"detail": detail, **extra}
    workspace = getattr(request.state, "workspace", None)
    if workspace is not None:
        body["view"] = jsonable_encoder(workspace.render())
    return body


def add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FormValidationError)
    async def form_validation_handler(request: Request, exc: FormValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(request, exc.message, field_errors=exc.field_errors),
        )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(request, exc.message),
        )

    @app.exception_handler(ConfirmationRequired)
    async def confirmation_handler(request: Request, exc: ConfirmationRequired):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body(request, exc.prompt, confirm=exc.prompt),
        )

    @app.exception_handler(FormBusyError)
    @app.exception_handler(InvalidTransition)
    async def conflict_handler(request: Request, exc: Exception):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body(request, str(exc)),
        )

    @app.exception_handler(NotAuthenticated)
    async def not_authenticated_handler(request: Request, exc: NotAuthenticated):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=_error_body(request, str(exc)),
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(request, str(exc)),
        )


def create_app(
    config: Settings = settings,
    session_factory: Optional[sessionmaker] = None,
    http: Optional[httpx.Client] = None,
) -> FastAPI:
    """
    Build the application. Tests pass their own session factory and an
    httpx client wired to a fake platform.
    """
    session_factory = session_factory or SessionLocal
    owns_http = http is None
    if http is None:
        http = httpx.Client(timeout=config.BACKEND_TIMEOUT_SECONDS)

    app = FastAPI(
        title=config.PROJECT_NAME,
        description="Motorcycle shop directory and rider garage",
        version="0.1.0",
        openapi_url=f"{config.API_V1_STR}/openapi.json",
    )

    # Set CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in config.BACKEND_CORS_ORIGINS] or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_middleware(app)
    add_exception_handlers(app)

    app.state.config = config
    app.state.session_factory = session_factory
    app.state.workspaces = WorkspaceRegistry(
        config, lambda: create_backend(config, http, session_factory)
    )

    # Include API router
    app.include_router(api_router, prefix=config.API_V1_STR)

    @app.get("/")
    async def root():
        """Root endpoint with basic service information."""
        return {
            "message": f"Welcome to {config.PROJECT_NAME} API",
            "version": "0.1.0",
            "docs_url": "/docs",
        }

    @app.on_event("startup")
    async def startup_event():
        """Run on application startup."""
        logger.info(f"Starting {config.PROJECT_NAME}...")
        # A missing URL or key is logged; the service still starts
        check_backend_config(config)

    @app.on_event("shutdown")
    async def shutdown_event():
        if owns_http:
            http.close()

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("motoshop.main:app", host="0.0.0.0", port=8000, reload=True)
