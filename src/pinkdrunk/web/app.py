"""FastAPI application for the pinkdrunk JSON API."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..db.engine import get_db_path, init_db
from ..errors import (
    DrinkNotFoundError,
    PinkDrunkError,
    ProfileNotFoundError,
    SessionNotFoundError,
    ValidationError,
)
from ..services.calibration import ThresholdService
from ..services.profiles import ProfileService
from ..services.sessions import SessionService
from .routers import profile, sessions


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    db_path = db_path or get_db_path()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - runs on startup and shutdown."""
        await init_db(db_path)
        yield

    app = FastAPI(
        title="pinkdrunk",
        description="Real-time alcohol impairment estimation and harm-reduction advice",
        version=__version__,
        lifespan=lifespan,
    )

    # One threshold service per app so per-user calibration locks are shared
    thresholds = ThresholdService(db_path)
    app.state.thresholds = thresholds
    app.state.profiles = ProfileService(db_path, thresholds=thresholds)
    app.state.sessions = SessionService(db_path, thresholds=thresholds)

    app.include_router(profile.router)
    app.include_router(sessions.router)

    @app.exception_handler(RequestValidationError)
    async def invalid_payload(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid payload"})

    @app.exception_handler(PinkDrunkError)
    async def domain_error(request: Request, exc: PinkDrunkError):
        if isinstance(exc, ValidationError):
            status_code = 400
        elif isinstance(exc, (ProfileNotFoundError, SessionNotFoundError, DrinkNotFoundError)):
            status_code = 404
        else:
            status_code = 500
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
