"""
Pydantic schemas for API request/response validation.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from sqlassist.db.session import Table


# ── Request ───────────────────────────────────────────────────────────────────

class AssistantRequest(BaseModel):
    q: Optional[str] = Field(
        default=None,
        description="Natural language question. Defaults to showing the first 10 records.",
        examples=["show users created this week"],
    )
    t: Optional[str] = Field(
        default=None,
        description="Name of the table the user is looking at; it is put first in the prompt.",
    )


# ── Assistant responses ───────────────────────────────────────────────────────

class AssistantError(BaseModel):
    error: str


# ── Browsing ──────────────────────────────────────────────────────────────────

class MetaResponse(BaseModel):
    dbms: list[str]
    assistant: bool
    tables: list[Table] = []


# ── Health check ──────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    assistant: bool
    databases: int
    version: str
