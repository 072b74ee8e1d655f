"""
API Routes — health, database browsing and the SQL assistant.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from sqlassist.api.schemas import AssistantRequest, HealthResponse, MetaResponse
from sqlassist.db.session import DatabaseNotFoundError, SchemaService, Table
from sqlassist.llm.registry import BackendRegistry
from sqlassist.services.assistant_service import handle_assistant

logger = logging.getLogger(__name__)

router = APIRouter()

APP_VERSION = "1.0.0"


# ── Dependencies ──────────────────────────────────────────────────────────────

def get_registry(request: Request) -> BackendRegistry:
    return request.app.state.registry


def get_schema_service(request: Request) -> SchemaService:
    return request.app.state.schemas


def _not_found(database: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Unknown database: {database}",
    )


# ── /health ───────────────────────────────────────────────────────────────────

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    tags=["Monitoring"],
)
def health_check(
    registry: BackendRegistry = Depends(get_registry),
    schemas: SchemaService = Depends(get_schema_service),
) -> HealthResponse:
    """
    Reports whether the database directory is readable and an assistant backend is configured.
    """
    dir_ok = schemas.ping()
    return HealthResponse(
        status="ok" if dir_ok else "degraded",
        assistant=registry.available(),
        databases=len(schemas.list_databases()),
        version=APP_VERSION,
    )


# ── Browsing ──────────────────────────────────────────────────────────────────

@router.get("/db", response_model=list[str], tags=["Databases"])
def list_databases(schemas: SchemaService = Depends(get_schema_service)) -> list[str]:
    return schemas.list_databases()


@router.get("/db/{database}", response_model=list[Table], tags=["Databases"])
async def list_tables(
    database: str,
    schemas: SchemaService = Depends(get_schema_service),
) -> list[Table]:
    try:
        return await schemas.fetch_tables(database)
    except DatabaseNotFoundError as exc:
        raise _not_found(database) from exc


@router.get("/meta", response_model=MetaResponse, tags=["Databases"])
async def meta(
    database: Optional[str] = None,
    registry: BackendRegistry = Depends(get_registry),
    schemas: SchemaService = Depends(get_schema_service),
) -> MetaResponse:
    """
    Everything a page needs to render its chrome: the database list, whether
    the assistant should be shown, and the tables of ``database`` if given.
    """
    tables: list[Table] = []
    if database:
        try:
            tables = await schemas.fetch_tables(database)
        except DatabaseNotFoundError as exc:
            raise _not_found(database) from exc
    return MetaResponse(
        dbms=schemas.list_databases(),
        assistant=registry.available(),
        tables=tables,
    )


# ── /db/{database}/assistant ──────────────────────────────────────────────────

@router.post(
    "/db/{database}/assistant",
    summary="Natural Language to SQL",
    tags=["Assistant"],
    responses={
        200: {
            "description": "Generated SQL, or an error payload when no backend is available.",
            "content": {
                "application/json": {
                    "examples": {
                        "sql": {
                            "summary": "SQL generated",
                            "value": {"sql": "SELECT * FROM `users` LIMIT 10"},
                        },
                        "no_backend": {
                            "summary": "No backend configured or reachable",
                            "value": {"error": "no backend"},
                        },
                    }
                }
            },
        },
        404: {"description": "Unknown database"},
        500: {"description": "Generation failed"},
    },
)
async def assistant(
    database: str,
    payload: AssistantRequest,
    registry: BackendRegistry = Depends(get_registry),
    schemas: SchemaService = Depends(get_schema_service),
) -> dict:
    """
    Generate one SQL statement for ``payload.q`` against ``database``.

    The SQL is returned, not executed.
    """
    try:
        return await handle_assistant(
            database=database,
            question=payload.q,
            target_table=payload.t,
            registry=registry,
            schemas=schemas,
        )
    except DatabaseNotFoundError as exc:
        raise _not_found(database) from exc
    except Exception as exc:
        logger.exception("Unhandled error in assistant for %s: %s", database, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"SQL generation failed: {exc}",
        ) from exc
