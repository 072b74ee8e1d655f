"""
Integration tests for the browsing and assistant endpoints.
Uses FastAPI TestClient with an in-process LLM backend and SQLite files on disk.

Run with: pytest tests/test_assistant_endpoint.py -v
"""
from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from sqlassist.core.config import Settings
from sqlassist.llm.client import LLMError
from sqlassist.llm.registry import BackendRegistry
from sqlassist.main import create_app


@pytest.fixture
def make_client(database_dir):
    def _make(*backends, health_check: bool = True) -> TestClient:
        settings = Settings(DATABASE_DIR=database_dir, LLM_PROVIDERS=[])
        registry = BackendRegistry(backends=tuple(backends), health_check=health_check)
        return TestClient(create_app(settings, registry=registry))

    return _make


# ── Health / browsing ─────────────────────────────────────────────────────────

class TestBrowsing:
    def test_health(self, make_client, backend_factory):
        r = make_client(backend_factory()).get("/api/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "assistant": True, "databases": 2, "version": "1.0.0"}

    def test_health_without_backend(self, make_client):
        assert make_client().get("/api/health").json()["assistant"] is False

    def test_list_databases(self, make_client):
        r = make_client().get("/api/db")
        assert r.status_code == 200
        assert r.json() == ["library", "shop"]

    def test_list_tables(self, make_client):
        r = make_client().get("/api/db/shop")
        assert r.status_code == 200
        assert r.json()[1] == {
            "name": "users",
            "columns": [{"name": "id", "type": "INTEGER"}, {"name": "email", "type": "TEXT"}],
            "count": 5,
        }

    def test_unknown_database(self, make_client):
        assert make_client().get("/api/db/nope").status_code == 404

    def test_meta(self, make_client, backend_factory):
        data = make_client(backend_factory()).get("/api/meta", params={"database": "library"}).json()
        assert data["dbms"] == ["library", "shop"]
        assert data["assistant"] is True
        assert [t["name"] for t in data["tables"]] == ["books"]

    def test_meta_without_database(self, make_client):
        assert make_client().get("/api/meta").json() == {
            "dbms": ["library", "shop"],
            "assistant": False,
            "tables": [],
        }


# ── Assistant ─────────────────────────────────────────────────────────────────

class TestAssistantEndpoint:
    def test_generates_sql(self, make_client, backend_factory):
        backend = backend_factory(reply='{"sql": "SELECT * FROM `users` LIMIT 10"}')
        r = make_client(backend).post(
            "/api/db/shop/assistant",
            json={"q": "show first 10 records in the table", "t": "users"},
        )

        assert r.status_code == 200
        assert r.json() == {"sql": "SELECT * FROM `users` LIMIT 10"}

        messages = backend.calls[0]["messages"]
        lines = messages[0]["content"].splitlines()
        assert "users (id: INTEGER, email: TEXT)" in lines
        assert lines.index("users (id: INTEGER, email: TEXT)") < lines.index(
            "orders (id: INTEGER, user_id: INTEGER, total: REAL)"
        )
        assert json.loads(messages[2]["content"]) == {"sql": "SELECT * FROM `users` LIMIT 10"}
        assert "pragma_table_info('users')" in messages[4]["content"]

    def test_examples_follow_first_table_without_target(self, make_client, backend_factory):
        backend = backend_factory()
        make_client(backend).post("/api/db/shop/assistant", json={"q": "anything"})
        assert "`orders`" in backend.calls[0]["messages"][2]["content"]

    def test_empty_body_uses_default_question(self, make_client, backend_factory):
        backend = backend_factory()
        r = make_client(backend).post("/api/db/library/assistant", json={})
        assert r.status_code == 200
        assert backend.calls[0]["messages"][-1]["content"] == "show first 10 records in the table"

    def test_destructive_request_passed_through(self, make_client, backend_factory):
        blocked = "SELECT 'Operation blocked for safety: Cannot delete tables' as message"
        backend = backend_factory(reply=json.dumps({"sql": blocked}))
        r = make_client(backend).post("/api/db/shop/assistant", json={"q": "delete table users"})

        assert r.json() == {"sql": blocked}
        assert backend.calls[0]["messages"][-1]["content"] == "delete table users"

    def test_no_backend_configured(self, make_client):
        r = make_client().post("/api/db/shop/assistant", json={"q": "hello"})
        assert r.status_code == 200
        assert r.json() == {"error": "no backend"}

    def test_no_backend_reachable(self, make_client, backend_factory):
        backend = backend_factory(reachable=False)
        r = make_client(backend).post("/api/db/shop/assistant", json={"q": "hello"})
        assert r.json() == {"error": "no backend"}
        assert backend.calls == []

    def test_no_backend_unknown_database(self, make_client):
        r = make_client().post("/api/db/nope/assistant", json={})
        assert r.json() == {"error": "no backend"}

    def test_unknown_database(self, make_client, backend_factory):
        backend = backend_factory()
        r = make_client(backend).post("/api/db/nope/assistant", json={"q": "x"})
        assert r.status_code == 404
        assert backend.calls == []

    def test_generation_failure_is_server_error(self, make_client, backend_factory):
        backend = backend_factory(reply=LLMError("model crashed"))
        r = make_client(backend).post("/api/db/shop/assistant", json={"q": "x"})
        assert r.status_code == 500
        assert "sql" not in r.json()

    def test_malformed_output_is_server_error(self, make_client, backend_factory):
        backend = backend_factory(reply='{"answer": "SELECT 1"}')
        r = make_client(backend).post("/api/db/shop/assistant", json={"q": "x"})
        assert r.status_code == 500

    def test_long_question_generates(self, make_client, backend_factory):
        backend = backend_factory()
        question = "x" * 5000
        r = make_client(backend).post("/api/db/shop/assistant", json={"q": question})
        assert r.status_code == 200
        assert r.json() == {"sql": "SELECT 1"}
        assert backend.calls[0]["messages"][-1]["content"] == question

    def test_long_question_without_backend(self, make_client):
        r = make_client().post("/api/db/shop/assistant", json={"q": "x" * 5000})
        assert r.status_code == 200
        assert r.json() == {"error": "no backend"}
