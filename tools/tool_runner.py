from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def run_tool(
    *,
    tool_name: str,
    request: Any,
    fn: Callable[[], T],
) -> T:
    """
    Generic tool execution wrapper.

    - Logs start with the request
    - Executes fn()
    - Logs finish with the elapsed time
    - Re-raises exceptions after logging
    """
    started = time.perf_counter()
    logger.info("tool start request=%s", request, extra={"tool": tool_name})

    try:
        result = fn()
    except Exception as e:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.warning(
            "tool failed elapsed_ms=%s error=%s", elapsed_ms, e, extra={"tool": tool_name}
        )
        raise

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logger.info("tool finish elapsed_ms=%s", elapsed_ms, extra={"tool": tool_name})
    return result
