"""
Application entry point.

Run with:
    uvicorn sqlassist.main:app --reload
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sqlassist.api.routes import router
from sqlassist.core.config import Settings, get_settings
from sqlassist.db.session import SchemaService
from sqlassist.llm.registry import BackendRegistry, build_registry

settings = get_settings()

# ── Logging ───────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── App factory ───────────────────────────────────────────────────────────────

def create_app(
    app_settings: Optional[Settings] = None,
    registry: Optional[BackendRegistry] = None,
) -> FastAPI:
    app_settings = app_settings or settings

    application = FastAPI(
        title=app_settings.APP_NAME,
        description=(
            "Browse SQLite databases and turn plain-English questions into a "
            "single SQL statement.\n\n"
            "The assistant only generates SQL; it never executes it."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Built once; read-only for the lifetime of the process.
    application.state.registry = registry if registry is not None else build_registry(app_settings)
    application.state.schemas = SchemaService(app_settings.DATABASE_DIR)

    # ── CORS ──────────────────────────────────────────────────────────────────
    application.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routes ────────────────────────────────────────────────────────────────
    application.include_router(router, prefix="/api")

    @application.get("/", include_in_schema=False)
    def root() -> JSONResponse:
        return JSONResponse(
            {
                "service": app_settings.APP_NAME,
                "docs": "/docs",
                "health": "/api/health",
                "databases": "/api/db",
            }
        )

    logger.info(
        "%s started (debug=%s, assistant=%s)",
        app_settings.APP_NAME,
        app_settings.DEBUG,
        application.state.registry.available(),
    )
    return application


app = create_app()
