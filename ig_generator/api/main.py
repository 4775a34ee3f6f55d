"""
FastAPI Application
==================

Main FastAPI application for the IG image generator.
Owns the shared browser and upload client for the lifetime of the process.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator, Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from ig_generator.config.settings import get_settings
from ig_generator.config.logging import get_logger
from ig_generator.api.routes.generate import router as generate_router, error_response
from ig_generator.core.rendering.orchestrator import SlideOrchestrator
from ig_generator.core.rendering.snapshot import BrowserManager, SnapshotRenderer
from ig_generator.core.templates.resolver import TemplateResolver
from ig_generator.core.upload.cloudinary import CloudinaryUploader
from ig_generator.models.schemas import HealthStatus

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting IG image generator", port=settings.port)

    # The browser itself is launched on the first render
    browser_manager = BrowserManager(settings)
    app.state.browser_manager = browser_manager
    app.state.orchestrator = SlideOrchestrator(
        SnapshotRenderer(browser_manager), TemplateResolver(settings.templates_dir)
    )
    app.state.uploader = CloudinaryUploader(settings)

    try:
        yield
    finally:
        logger.info("Shutting down IG image generator")

        try:
            await browser_manager.close()
        except Exception as e:
            logger.error("Error closing browser", error=str(e))

        try:
            await app.state.uploader.close()
            logger.info("Upload client closed")
        except Exception as e:
            logger.error("Error closing upload client", error=str(e))


# Create FastAPI app
settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    description="Render Instagram carousel slides to PNG and upload them to Cloudinary",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.enable_docs else None,
    redoc_url="/redoc" if settings.enable_docs else None,
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_hosts,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(generate_router)


# Body size middleware
@app.middleware("http")
async def limit_body_size(request: Request, call_next) -> JSONResponse:  # type: ignore
    """Reject bodies larger than the configured limit."""
    max_body_size = get_settings().max_body_size
    content_length = request.headers.get("content-length")

    if content_length and content_length.isdigit():
        if int(content_length) > max_body_size:
            logger.warning("Request body too large", content_length=int(content_length))
            return error_response(413, "Request entity too large")
    elif request.method in ("POST", "PUT", "PATCH"):
        # Chunked body: count while reading
        chunks = []
        received = 0
        async for chunk in request.stream():
            chunks.append(chunk)
            received += len(chunk)
            if received > max_body_size:
                logger.warning("Request body too large", received=received)
                return error_response(413, "Request entity too large")
        # Replayed to the route by Starlette's cached request
        request._body = b"".join(chunks)  # type: ignore

    return await call_next(request)  # type: ignore


# Request ID middleware, registered last so it wraps every response
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> JSONResponse:  # type: ignore
    """Add request ID to all requests."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)  # type: ignore
    response.headers["X-Request-ID"] = request_id  # type: ignore

    return response  # type: ignore


# Exception handlers
@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed JSON or wrongly typed fields are client errors."""
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"

    logger.warning(
        "Invalid request body",
        detail=detail,
        request_id=getattr(request.state, "request_id", None),
    )

    return error_response(400, f"Invalid request body: {detail}")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """General exception handler for unexpected errors."""
    logger.error(
        "Unhandled exception",
        exception=str(exc),
        request_id=getattr(request.state, "request_id", None),
        exc_info=True,
    )

    return error_response(500, str(exc) or "Internal server error")


# Health check endpoint
@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check() -> HealthStatus:
    """Liveness probe."""
    return HealthStatus()


# Root endpoint
@app.get("/", tags=["General"])
async def root() -> dict[str, Any]:
    """
    Root endpoint with basic API information.
    """
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Render Instagram carousel slides to PNG and upload them to Cloudinary",
        "health_check": "/health",
        "endpoints": {
            "generate": "POST /generate",
            "health": "GET /health",
        },
        "templates": TemplateResolver.available_templates(),
    }


def run_server() -> None:
    """Run the API server with uvicorn."""
    uvicorn.run(
        "ig_generator.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


def create_app() -> FastAPI:
    """
    Application factory function for creating FastAPI app instance.
    Used by integration tests and external deployment scripts.

    Returns:
        FastAPI application instance
    """
    return app


if __name__ == "__main__":
    run_server()
