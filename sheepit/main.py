"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sheepit import __version__
from sheepit.api.middleware import RequestLoggingMiddleware
from sheepit.api.v1.router import router as v1_router
from sheepit.config import settings
from sheepit.core.exceptions import ProviderError, SheepItError
from sheepit.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    logger.info(
        "application.starting",
        version=__version__,
        environment=settings.app_env,
    )
    if not settings.encryption_key:
        logger.warning("application.encryption_key_missing")

    yield

    logger.info("application.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SheepIt API",
        description="One-click deploys of a local folder to GitHub, Vercel and Cloudflare",
        version=__version__,
        docs_url="/docs" if settings.app_debug else None,
        redoc_url="/redoc" if settings.app_debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(SheepItError)
    async def sheepit_error_handler(request: Request, exc: SheepItError) -> JSONResponse:
        """Render application errors with their own status code."""
        if isinstance(exc, ProviderError):
            logger.error(
                "provider.request_failed",
                path=request.url.path,
                error=exc.message,
                **exc.details,
            )
        elif exc.status_code >= 500:
            logger.error("request.failed", path=request.url.path, error=exc.message)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": type(exc).__name__.upper(),
                    "message": exc.public_message,
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error(
            "unhandled_exception",
            error=str(exc),
            path=request.url.path,
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                }
            },
        )

    app.include_router(v1_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sheepit.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
