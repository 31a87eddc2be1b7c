from __future__ import annotations

import logging
import os

from app.config import get_settings

logger = logging.getLogger(__name__)


def configure_langsmith() -> bool:
    """Export LangSmith tracing env vars for the LLM agent. Returns whether tracing is on."""
    s = get_settings()

    if not s.langsmith_tracing or not s.llm_available:
        return False

    os.environ["LANGCHAIN_TRACING_V2"] = "true"
    if s.langsmith_api_key:
        os.environ["LANGCHAIN_API_KEY"] = s.langsmith_api_key
    os.environ["LANGCHAIN_PROJECT"] = s.langsmith_project
    os.environ["LANGCHAIN_ENDPOINT"] = s.langsmith_endpoint
    logger.info("langsmith tracing enabled project=%s", s.langsmith_project)
    return True
