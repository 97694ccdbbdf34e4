"""FastAPI application factory for the DocuCloud Solutions site backend."""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings
from .database import create_db_engine, create_session_factory, init_db
from .ratelimit import RateLimiter
from .routes.analytics import router as analytics_router
from .routes.health import router as health_router
from .routes.inquiry import admin_router, router as inquiry_router
from .security_headers import SecurityHeadersMiddleware
from .services.notifications import build_notifier

logger = logging.getLogger(__name__)

TRACKER_SCRIPT = os.path.join(os.path.dirname(__file__), "static", "analytics.js")


def create_app(settings: Settings = None, notifier=None) -> FastAPI:
    """Create and configure the application.

    The database engine and the email notifier are built here and kept on
    ``app.state``; pass ``notifier`` to substitute a different one.
    """
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level)

    engine = create_db_engine(settings.database_url)
    init_db(engine)

    app = FastAPI(
        title="DocuCloud Solutions API",
        description="Contact form intake and first-party visitor analytics",
        version=__version__,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.notifier = notifier or build_notifier(settings)
    app.state.rate_limiter = RateLimiter(settings.rate_limit_max, settings.rate_limit_window_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if request.url.path.startswith("/api/"):
            key = request.client.host if request.client else "unknown"
            allowed, retry_after = app.state.rate_limiter.allow(key)
            if not allowed:
                logger.warning("Rate limit exceeded for %s", key)
                return JSONResponse(
                    status_code=429,
                    content={
                        "success": False,
                        "message": "Too many requests from this IP, please try again later.",
                    },
                    headers={"Retry-After": str(retry_after)},
                )
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    # Added last so it wraps the rate limiter and its 429 responses
    app.add_middleware(SecurityHeadersMiddleware, settings=settings)

    app.include_router(health_router)
    app.include_router(analytics_router)
    app.include_router(inquiry_router)
    app.include_router(admin_router)

    @app.get("/analytics.js", include_in_schema=False)
    async def get_tracker_js():
        """Serves the client-side tracking script."""
        return FileResponse(TRACKER_SCRIPT, media_type="application/javascript")

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"success": False, "message": "Invalid request"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"success": False, "message": message})

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Server error on %s %s", request.method, request.url.path)
        message = "Internal server error" if settings.is_production else str(exc)
        return JSONResponse(status_code=500, content={"success": False, "message": message})

    if settings.static_dir:
        if os.path.isdir(settings.static_dir):
            app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="public")
        else:
            logger.warning("STATIC_DIR %s does not exist; public site not served", settings.static_dir)

    logger.info("DocuCloud Solutions API ready (%s)", settings.environment)
    return app
