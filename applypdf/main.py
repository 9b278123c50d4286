"""
ApplyPDF API - FastAPI Application
Main application entry point
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging

from applypdf.config import Settings, settings as default_settings
from applypdf.core.container import ServiceContainer, build_container
from applypdf.core.errors import (
    AppError, ErrorKind, error_response_body, log_error, new_reference_id
)
from applypdf.api import submissions, users

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _error_response(error: AppError, settings: Settings, context: str) -> JSONResponse:
    reference_id = None
    if error.status_code >= 500:
        reference_id = new_reference_id()
        context = f"{context} ref={reference_id}"
    log_error(error, context)

    return JSONResponse(
        status_code=error.status_code,
        content=error_response_body(error, settings.is_development, reference_id)
    )


def create_app(settings: Settings = default_settings, container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: Application settings
        container: Pre-built services; built from settings at startup when omitted

    Returns:
        FastAPI: Configured application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler
        Runs on startup and shutdown
        """
        logger.info(f"Starting {settings.PROJECT_NAME}...")

        owned = container is None
        app.state.services = build_container(settings) if owned else container
        logger.info("Application startup complete")

        yield

        logger.info(f"Shutting down {settings.PROJECT_NAME}...")
        if owned:
            app.state.services.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Job application submission service that renders applications to PDF",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _error_response(exc, settings, f"{request.method} {request.url.path}")

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        error = AppError(ErrorKind.VALIDATION, "Invalid request parameters", {"validationErrors": errors})
        return _error_response(error, settings, f"{request.method} {request.url.path}")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": str(exc.detail),
                "code": "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR",
                "statusCode": exc.status_code,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions"""
        error = AppError(ErrorKind.INTERNAL, str(exc), is_operational=False)
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return _error_response(error, settings, f"{request.method} {request.url.path}")

    app.include_router(submissions.router, prefix=settings.API_V1_PREFIX)
    app.include_router(users.router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    async def root():
        """Root endpoint - API information"""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "status": "running",
            "docs": "/docs",
            "redoc": "/redoc"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "applypdf-api",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get(f"{settings.API_V1_PREFIX}/info")
    async def api_info():
        """Get API information"""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "api_prefix": settings.API_V1_PREFIX,
            "endpoints": {
                "submissions": f"{settings.API_V1_PREFIX}/submissions",
                "users": f"{settings.API_V1_PREFIX}/users"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "applypdf.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG
    )
