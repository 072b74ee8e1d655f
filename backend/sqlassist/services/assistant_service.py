"""
Assistant Service — orchestrates one NL→SQL request.

Flow
----
1. Select a backend and fetch the table list concurrently.
2. Return ``{"error": "no backend"}`` if no backend is usable.
3. Put the target table first.
4. Generate the SQL and return ``{"sql": ...}``.

The generated SQL is never executed here.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from sqlassist.api.schemas import AssistantError
from sqlassist.db.session import SchemaService
from sqlassist.llm.nl2sql import generate_sql
from sqlassist.llm.prompt_builder import prioritize_table
from sqlassist.llm.registry import BackendRegistry

logger = logging.getLogger(__name__)

NO_BACKEND = "no backend"


def _discard(task: asyncio.Future) -> None:
    task.cancel()
    # retrieve a failure that raced the cancel so it is not reported as unhandled
    task.add_done_callback(lambda t: t.cancelled() or t.exception())


async def handle_assistant(
    database: str,
    question: Optional[str],
    target_table: Optional[str],
    registry: BackendRegistry,
    schemas: SchemaService,
) -> dict[str, Any]:
    """
    Process an assistant request end-to-end and return a JSON-serialisable response.
    """
    # ── Step 1: Backend selection and schema fetch run side by side ───────────
    tables_task = asyncio.ensure_future(schemas.fetch_tables(database))
    try:
        backend = await registry.select_backend()
    except BaseException:
        _discard(tables_task)
        raise

    # ── Step 2: No backend is a normal outcome ────────────────────────────────
    if backend is None:
        _discard(tables_task)
        logger.info("Assistant request for %s: no backend available", database)
        return AssistantError(error=NO_BACKEND).model_dump()

    tables = await tables_task

    # ── Step 3: Target table goes first ───────────────────────────────────────
    tables = prioritize_table(tables, target_table)

    # ── Step 4: Generate ──────────────────────────────────────────────────────
    generated = await generate_sql(backend, tables, question)
    return generated.model_dump()
