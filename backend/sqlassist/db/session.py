"""
SQLite database discovery and schema introspection utilities.

Every ``.sqlite`` / ``.sqlite3`` / ``.db`` file inside ``DATABASE_DIR`` is a
browsable database, addressed by its file stem.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

DATABASE_SUFFIXES = (".sqlite", ".sqlite3", ".db")


# ── Result types ──────────────────────────────────────────────────────────────

class Column(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str


class Table(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    columns: list[Column]
    count: int


class DatabaseNotFoundError(LookupError):
    """Raised when a database name does not resolve to a file in DATABASE_DIR."""


# ── Engine ────────────────────────────────────────────────────────────────────

def create_app_engine(path: Path) -> Engine:
    url = f"sqlite:///{path.resolve().as_posix()}"
    return create_engine(url, connect_args={"check_same_thread": False})


# ── Schema service ────────────────────────────────────────────────────────────

class SchemaService:
    """Lists databases and returns table metadata for one of them."""

    def __init__(self, database_dir: Path) -> None:
        self.database_dir = Path(database_dir)

    def list_databases(self) -> list[str]:
        if not self.database_dir.is_dir():
            logger.warning("Database directory %s does not exist", self.database_dir)
            return []
        return sorted(
            p.stem
            for p in self.database_dir.iterdir()
            if p.is_file() and p.suffix.lower() in DATABASE_SUFFIXES
        )

    def resolve(self, database: str) -> Path:
        """Map a database name to its file, rejecting anything path-like."""
        if not database or "/" in database or "\\" in database or database.startswith("."):
            raise DatabaseNotFoundError(database)
        for suffix in DATABASE_SUFFIXES:
            candidate = self.database_dir / f"{database}{suffix}"
            if candidate.is_file():
                return candidate
        raise DatabaseNotFoundError(database)

    def get_tables(self, database: str) -> list[Table]:
        path = self.resolve(database)
        engine = create_app_engine(path)
        try:
            inspector = inspect(engine)
            quote = engine.dialect.identifier_preparer.quote
            tables: list[Table] = []
            with engine.connect() as conn:
                for table_name in inspector.get_table_names():
                    columns = [
                        Column(name=col["name"], type=str(col["type"]))
                        for col in inspector.get_columns(table_name)
                    ]
                    count = conn.execute(
                        text(f"SELECT COUNT(*) FROM {quote(table_name)}")
                    ).scalar_one()
                    tables.append(Table(name=table_name, columns=columns, count=count))
        finally:
            engine.dispose()

        logger.debug("Loaded %d table(s) from %s", len(tables), database)
        return tables

    async def fetch_tables(self, database: str) -> list[Table]:
        return await asyncio.to_thread(self.get_tables, database)

    def ping(self) -> bool:
        return self.database_dir.is_dir()
