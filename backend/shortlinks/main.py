from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from . import __version__
from .api import auth, dashboard, links
from .config import Settings, get_settings
from .core.errors import ShortLinkError
from .core.rate_limit import make_limiter
from .database import create_tables, make_engine, make_session_factory
from .logger import configure_logging, get_logger
from .services.clicks import ClickRecorder
from .utils.geo import GeoLocator

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.engine.dispose()


async def short_link_error_handler(request: Request, exc: ShortLinkError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "message": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": jsonable_encoder(exc.errors())
        }
    )


def create_app(settings: Optional[Settings] = None, geolocate=None) -> FastAPI:
    """
    Build the application with its own engine, session factory and click recorder.

    Args:
        settings: Configuration; defaults to environment/.env
        geolocate: Callable ip -> GeoData; defaults to GeoLocator from settings
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    engine = make_engine(settings.DATABASE_URL)
    create_tables(engine)
    session_factory = make_session_factory(engine)

    if geolocate is None:
        geolocate = GeoLocator(
            enabled=settings.GEO_ENABLED,
            timeout=settings.GEO_TIMEOUT,
            findip_token=settings.GEO_FINDIP_TOKEN
        )

    # Initialize FastAPI app
    app = FastAPI(
        title="Short Links",
        description="URL shortening service with click analytics",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.click_recorder = ClickRecorder(session_factory, geolocate)

    # Setup rate limiter
    limiter = make_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(ShortLinkError, short_link_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Session cookie carries the anonymous quota id
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
        https_only=settings.SESSION_HTTPS_ONLY
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify exact origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(links.router, prefix="/api", tags=["links"])
    app.include_router(dashboard.router, prefix="/api", tags=["dashboard"])

    @app.get("/api/health")
    def health_check(request: Request):
        """Health check endpoint; pings the database"""
        try:
            with request.app.state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return JSONResponse(status_code=503, content={"status": "warming"})
        return {"status": "ok"}

    # Shorten and the redirect catch-all (must be last to not conflict with other routes)
    links.add_rate_limited_routes(app, limiter, settings)

    logger.info("Application initialized")
    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
