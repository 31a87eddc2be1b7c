from __future__ import annotations

import re

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import set_session_id

# routing has not run yet, so session-scoped paths are matched by hand
_SESSION_PATH_RE = re.compile(r"^/v1/(?:chat|todos)/(?!message(?:/|$))([^/]+)")


class SessionContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        """
        Sets session_id into contextvars for the lifetime of the request.

        Priority:
        1. Path segment: /v1/chat/{session_id}/..., /v1/todos/{session_id}
        2. Header: X-Session-Id
        """
        session_id = None

        match = _SESSION_PATH_RE.match(request.url.path)
        if match:
            session_id = match.group(1)

        if not session_id:
            session_id = request.headers.get("X-Session-Id")

        try:
            if session_id:
                set_session_id(str(session_id))
            response = await call_next(request)
            return response
        finally:
            # always clear context
            set_session_id(None)
