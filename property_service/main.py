import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from property_service.adapters.attom.client import AttomClient
from property_service.api.error_handlers import handle_unclassified_exception, register_exception_handlers
from property_service.core.config import Settings, get_settings, load_env_file
from property_service.core.logging import configure_logging, get_logger, set_correlation_id
from property_service.infrastructure.cache import MemoryCache


# Load environment variables and configure logging early
load_env_file()
configure_logging()
logger = get_logger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-DNS-Prefetch-Control": "off",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the cache and the provider client at startup, tear them down at shutdown."""
    settings: Settings = app.state.settings
    logger.info("Starting up Property Details Service")

    if settings.uses_insecure_api_key:
        logger.warning("ATTOM_API_KEY is not set; using the insecure placeholder key")

    cache = MemoryCache(
        default_ttl=settings.CACHE_TTL,
        cleanup_interval=settings.CACHE_CHECK_PERIOD
    )
    cache.start()
    provider = AttomClient(
        api_key=settings.ATTOM_API_KEY,
        base_url=settings.ATTOM_BASE_URL,
        timeout=settings.DEFAULT_TIMEOUT
    )
    app.state.cache = cache
    app.state.property_provider = provider

    try:
        yield
    finally:
        logger.info("Shutting down Property Details Service")
        await provider.close()
        cache.close()


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan
    )
    app.state.settings = settings

    configure_middleware(app, settings)
    register_exception_handlers(app)
    register_routers(app)

    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configure middleware components for the FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracking middleware
    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next: Callable):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {str(e)}",
                extra={
                    "request_path": request.url.path,
                    "method": request.method,
                    "process_time_ms": round(process_time * 1000, 2),
                }
            )
            # Build the 500 here so it still passes through the header middleware
            response = await handle_unclassified_exception(request, e)

        response.headers["X-Correlation-ID"] = correlation_id

        process_time = time.time() - start_time
        logger.info(
            "Request completed",
            extra={
                "request_path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2)
            }
        )

        return response

    # Registered last so it wraps every other layer
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next: Callable):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


def register_routers(app: FastAPI) -> None:
    """
    Register API routers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    from property_service.api.routes.health import health_router
    from property_service.api.routes.property import property_router

    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(property_router, prefix="/api/property", tags=["Property"])


app = create_application()


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("property_service.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
