"""
transport_billing/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers routers, route protection and exception handlers
- Manages the session lifecycle (startup/shutdown)
- No business logic should be written here
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional
import time

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from transport_billing.api import auth, entries, profile, views
from transport_billing.api.middleware import RouteProtectionMiddleware
from transport_billing.core.config import settings, validate_settings
from transport_billing.core.errors import add_exception_handlers
from transport_billing.core.logging import setup_logging, get_logger
from transport_billing.db.storage import KeyValueStore, close_store, open_store
from transport_billing.services.container import build_services

# Initialize logging first
setup_logging()
logger = get_logger(__name__)

VERSION = "1.0.0"


def create_app(
    store: Optional[KeyValueStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """
    Builds the app. ``store``, ``transport`` and ``clock`` default to the
    JSON file store, the real network and wall-clock time.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting transport billing client...")

        try:
            validate_settings()
            logger.info("Configuration validated")

            services = build_services(store if store is not None else open_store(), transport=transport, clock=clock)
            app.state.services = services

            state = await services.session.init()
            logger.info(f"Session restored: {state.value}")
            logger.info(f"Environment: {settings.ENVIRONMENT}")
            logger.info(f"Backend: {settings.API_BASE_URL}")

        except Exception as e:
            logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
            raise

        yield

        logger.info("Shutting down transport billing client...")
        try:
            await app.state.services.close()
            if store is None:
                close_store()
            logger.info("Shut down cleanly")
        except Exception as e:
            logger.error(f"Error during shutdown: {str(e)}", exc_info=True)

    app = FastAPI(
        title="Transport Billing",
        description="Session, analytics and entry management client for the transport billing API",
        version=VERSION,
        lifespan=lifespan,
        debug=settings.DEBUG,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.add_middleware(RouteProtectionMiddleware, protected_paths=settings.PROTECTED_PATHS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if process_time > 5.0:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={"endpoint": request.url.path}
            )

        return response

    add_exception_handlers(app)

    app.include_router(auth.router, tags=["Auth"])
    app.include_router(views.router, tags=["Views"])
    app.include_router(entries.router, tags=["Entries"])
    app.include_router(profile.router, tags=["Profile"])

    @app.get("/", tags=["Health"])
    async def root(request: Request):
        """Root endpoint - basic info."""
        session = request.app.state.services.session
        return {
            "name": "Transport Billing",
            "version": VERSION,
            "status": "running",
            "environment": settings.ENVIRONMENT,
            "session": session.state.value,
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Health check: session state and backend reachability.
        """
        services = request.app.state.services
        health_status = {
            "status": "healthy",
            "timestamp": time.time(),
            "environment": settings.ENVIRONMENT,
            "version": VERSION,
            "checks": {"session": services.session.state.value},
        }

        backend = await services.api.health_check()
        health_status["checks"]["backend"] = "healthy" if backend.success else "unhealthy"
        if not backend.success:
            health_status["status"] = "degraded"

        status_code = 200 if health_status["status"] == "healthy" else 503
        return JSONResponse(content=health_status, status_code=status_code)

    @app.get("/live", tags=["Health"])
    async def liveness_check():
        """
        Liveness probe - indicates if app is alive.
        """
        return {"status": "alive"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "transport_billing.main:app",
        host="0.0.0.0",
        port=3000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
