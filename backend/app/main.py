"""Breaker Panel Catalog backend.

Responsibilities:
  1. Panel, breaker, room and circuit persistence (async SQLAlchemy)
  2. Atomic breaker move/swap between panel addresses
  3. Move previews for the panel UI

Errors from every layer leave the API as ``{"error": ..., "kind": ...}``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.db.session import close_db, init_db, is_db_available
from app.errors import PanelCatalogError, StorageError
from app.routers import breakers, circuit, panels, rooms

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: prepare the schema. Shutdown: close DB pool."""
    await init_db()
    yield
    await close_db()


def _error_body(message: str, kind: str, **extra) -> dict:
    body = {"error": message, "kind": kind}
    body.update(extra)
    return body


def register_exception_handlers(application: FastAPI) -> None:
    @application.exception_handler(PanelCatalogError)
    async def handle_catalog_error(request: Request, exc: PanelCatalogError):
        extra = {}
        # Driver text stays server-side in production
        expose = not get_settings().is_production
        if isinstance(exc, StorageError) and exc.detail and expose:
            extra["detail"] = exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.kind, **extra),
        )

    @application.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"][1:]),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        message = errors[0]["message"] if errors else "Invalid request"
        return JSONResponse(
            status_code=400,
            content=_error_body(message, "validation", errors=errors),
        )


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title=settings.app_name,
        version=VERSION,
        description=(
            "Catalog of electrical panels, breakers, rooms and circuits.\n\n"
            "Breaker moves run as a single transaction: either every circuit "
            "lands at its destination or nothing changes."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(application)

    # ─── Panels ───
    application.include_router(panels.router, prefix="/api", tags=["Panels"])

    # ─── Breakers, moves and previews ───
    application.include_router(breakers.router, prefix="/api", tags=["Breakers"])

    # ─── Rooms ───
    application.include_router(rooms.router, prefix="/api", tags=["Rooms"])

    # ─── Circuits ───
    application.include_router(circuit.router, prefix="/api", tags=["Circuits"])

    @application.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "service": "breaker-panel-catalog",
            "version": VERSION,
            "database": "connected" if is_db_available() else "unavailable",
        }

    return application


app = create_app()
