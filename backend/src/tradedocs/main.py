"""
FastAPI application entry point.

This is the main application that ties together all components:
- API routes for document intake, case files and association
- Requirement table loading at startup
- CORS configuration for frontend access
- Error handling and logging
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradedocs import __version__
from tradedocs.api.dependencies import get_engine
from tradedocs.api.routes import cases, debug, documents, health
from tradedocs.api.schemas import ErrorResponse
from tradedocs.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the engine at startup so a broken requirement table stops the
    process before it serves a request.
    """
    settings = get_settings()

    logger.info(f"Starting tradedocs v{__version__}")
    logger.info(f"Debug mode: {settings.debug}")

    engine = get_engine()
    logger.info(f"Requirement table: {len(engine.requirements.permit_rules)} permit rules")

    yield  # Application runs here

    logger.info("Shutting down tradedocs")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance ready to serve requests.
    """
    settings = get_settings()

    app = FastAPI(
        title="tradedocs API",
        description=(
            "Trade document classification and cross-validation.\n\n"
            "Classifies import documents, groups them into case files and "
            "produces advisory compliance verdicts for a licensed reviewer."
        ),
        version=__version__,
        lifespan=lifespan,
        responses={500: {"model": ErrorResponse, "description": "Unhandled internal error"}},
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health.router)
    app.include_router(documents.router, prefix="/api/v1")
    app.include_router(cases.router, prefix="/api/v1")

    # Debug router (only in debug mode)
    if settings.debug:
        app.include_router(debug.router, prefix="/api/v1")

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all exception handler for unhandled errors."""
        logger.exception(f"Unhandled error: {exc}")

        # Don't expose internal errors in production
        if settings.debug:
            detail = str(exc)
        else:
            detail = "An internal error occurred"

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": detail,
            },
        )

    return app


# Create the application instance
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tradedocs.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
