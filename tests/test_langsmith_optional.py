from __future__ import annotations

import os

from fastapi.testclient import TestClient

from app.config import get_settings
from app.core.langsmith import configure_langsmith
from app.main import create_app


def test_app_starts_without_langsmith_env(monkeypatch):
    """
    LangSmith must be OPTIONAL.
    App should start even if tracing env vars are missing.
    """
    monkeypatch.delenv("LANGSMITH_TRACING", raising=False)
    monkeypatch.delenv("LANGSMITH_API_KEY", raising=False)
    monkeypatch.delenv("LANGCHAIN_TRACING_V2", raising=False)
    get_settings.cache_clear()

    app = create_app()
    with TestClient(app) as client:
        r = client.get("/healthz")
        assert r.status_code == 200


def test_tracing_stays_off_without_llm(monkeypatch):
    """
    Tracing is requested but no model is configured, so nothing is exported.
    """
    monkeypatch.setenv("LANGSMITH_TRACING", "true")
    monkeypatch.delenv("LANGCHAIN_TRACING_V2", raising=False)
    get_settings.cache_clear()

    assert configure_langsmith() is False
    assert "LANGCHAIN_TRACING_V2" not in os.environ


def test_tracing_exports_env_when_enabled(monkeypatch):
    monkeypatch.setenv("LANGSMITH_TRACING", "true")
    monkeypatch.setenv("LANGSMITH_PROJECT", "seifun-agent-test")
    monkeypatch.setenv("LLM_ENABLED", "true")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    for name in ("LANGCHAIN_TRACING_V2", "LANGCHAIN_API_KEY", "LANGCHAIN_PROJECT", "LANGCHAIN_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    assert configure_langsmith() is True
    assert os.environ["LANGCHAIN_TRACING_V2"] == "true"
    assert os.environ["LANGCHAIN_PROJECT"] == "seifun-agent-test"
