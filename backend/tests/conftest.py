"""
Shared fixtures: SQLite databases on disk and an in-process LLM backend.
"""
from __future__ import annotations

from typing import Any

import pytest
import requests
from sqlalchemy import create_engine, text

from sqlassist.llm.client import LLMBackend


class FakeBackend(LLMBackend):
    """Backend double that records every chat request and replies with ``reply``."""

    def __init__(self, name: str = "fake", reply: Any = '{"sql": "SELECT 1"}', reachable: bool = True):
        super().__init__(name, "fake-model")
        self.reply = reply
        self.reachable = reachable
        self.calls: list[dict[str, Any]] = []

    def _chat(self, messages, schema_name, json_schema):
        self.calls.append(
            {"messages": messages, "schema_name": schema_name, "json_schema": json_schema}
        )
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    def _ping(self):
        if not self.reachable:
            raise requests.ConnectionError(f"{self.name} is down")


@pytest.fixture
def backend_factory():
    return FakeBackend


def _create_database(path, statements):
    engine = create_engine(f"sqlite:///{path.as_posix()}")
    with engine.begin() as conn:
        for statement in statements:
            conn.execute(text(statement))
    engine.dispose()


@pytest.fixture
def database_dir(tmp_path):
    """
    shop.sqlite : orders (0 rows), users (5 rows)
    library.db  : books (1 row)
    """
    _create_database(
        tmp_path / "shop.sqlite",
        [
            "CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT)",
            "CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, total REAL)",
            "INSERT INTO users (email) VALUES ('a@example.com'), ('b@example.com'), "
            "('c@example.com'), ('d@example.com'), ('e@example.com')",
        ],
    )
    _create_database(
        tmp_path / "library.db",
        [
            'CREATE TABLE "books" (isbn TEXT PRIMARY KEY, title TEXT, pages INTEGER)',
            "INSERT INTO books VALUES ('978-0', 'SQL Basics', 120)",
        ],
    )
    (tmp_path / "readme.txt").write_text("not a database")
    return tmp_path
