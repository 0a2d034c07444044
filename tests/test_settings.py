import importlib
import json
import logging

import task_tracker.main
from task_tracker.generate_openapi import build_schema, generate_openapi
from task_tracker.logging_setup import setup_logging
from task_tracker.settings import get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in [
            "PERSISTENCE_BACKEND",
            "SQLITE_DB_PATH",
            "CORS_ALLOW_ORIGINS",
            "LOG_LEVEL",
            "HOST",
            "PORT",
            "API_BASE_URL",
        ]:
            monkeypatch.delenv(name, raising=False)

        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.sqlite_db_path == "./data/tasks.db"
        assert s.cors_allow_origins == ["http://localhost:5173"]
        assert s.log_level == "INFO"
        assert s.port == 8080
        assert s.api_base_url == "http://localhost:8080/api/v1"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "SQLite")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("API_BASE_URL", "http://api.test/api/v1/")

        s = get_settings()
        assert s.persistence_backend == "sqlite"
        assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert s.log_level == "DEBUG"
        assert s.port == 9000
        assert s.api_base_url == "http://api.test/api/v1"

    def test_unsupported_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "mysql")
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        monkeypatch.setenv("PORT", "eighty")

        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.log_level == "INFO"
        assert s.port == 8080


def test_setup_logging_is_idempotent():
    logger = setup_logging("WARNING")
    handlers = list(logger.handlers)
    setup_logging("DEBUG")
    assert logger.handlers == handlers
    assert logger.level == logging.DEBUG


class TestOpenApi:
    def test_schema_lists_task_routes(self):
        schema = build_schema()
        assert set(schema["paths"]) >= {"/", "/api/v1/tasks", "/api/v1/tasks/{task_id}"}
        assert set(schema["paths"]["/api/v1/tasks/{task_id}"]) == {"get", "put", "delete"}
        assert {t["name"] for t in schema["tags"]} >= {"health", "tasks"}

    def test_writes_file(self, tmp_path):
        out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
        with open(out, encoding="utf-8") as f:
            schema = json.load(f)
        assert schema["info"]["title"] == "Task Tracker"

    def test_build_leaves_configured_database_alone(self, tmp_path, monkeypatch):
        db_path = tmp_path / "data" / "tasks.db"
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        monkeypatch.setenv("SQLITE_DB_PATH", str(db_path))

        importlib.reload(task_tracker.main)
        build_schema()

        assert not db_path.exists()
        assert not db_path.parent.exists()
