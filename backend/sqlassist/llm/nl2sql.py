from __future__ import annotations

import logging
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from sqlassist.db.session import Table
from sqlassist.llm.client import Example, LLMBackend
from sqlassist.llm.prompt_builder import build_prompt

logger = logging.getLogger(__name__)

DEFAULT_QUESTION = "show first 10 records in the table"


class GeneratedQuery(BaseModel):
    """Output contract of the generation call; unknown fields are dropped."""

    sql: str = Field(..., description="The SQL query to run")


def build_examples(tables: Sequence[Table]) -> list[Example]:
    """Few-shot pairs anchored to whichever table is first."""
    if not tables:
        return []
    first = tables[0].name
    return [
        (DEFAULT_QUESTION, GeneratedQuery(sql=f"SELECT * FROM `{first}` LIMIT 10")),
        (
            "show columns in the table",
            GeneratedQuery(sql=f"SELECT name, type FROM pragma_table_info('{first}')"),
        ),
    ]


async def generate_sql(
    backend: LLMBackend,
    tables: Sequence[Table],
    question: Optional[str] = None,
) -> GeneratedQuery:
    """
    Ask ``backend`` for one SQL statement answering ``question``.

    ``tables`` must already be in prompt order.  The returned SQL is passed
    through untouched; errors from the backend propagate.
    """
    question = question or DEFAULT_QUESTION

    get_sql = backend.task(
        build_prompt(tables),
        GeneratedQuery,
        examples=build_examples(tables),
    )
    logger.info("Generating SQL with %s for %r", backend.name, question)
    outcome = await get_sql(question)
    return GeneratedQuery(sql=outcome.result.sql)
