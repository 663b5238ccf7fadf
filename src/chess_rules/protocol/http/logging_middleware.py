from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")
_GAME_PATH_RE = re.compile(r"^/api/games/([^/]+)")


def _incoming_request_id(request: Request) -> Optional[str]:
    value = request.headers.get(REQUEST_ID_HEADER)
    if value and _REQUEST_ID_RE.match(value):
        return value
    return None


def _game_id(path: str) -> Optional[str]:
    m = _GAME_PATH_RE.match(path)
    return m.group(1) if m else None


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log one line in, one line out.

    A well-formed caller ``x-request-id`` is reused; anything else is
    replaced by a fresh uuid. Requests under ``/api/games/{id}`` also carry
    the game id in their log records. Server errors are logged at WARNING.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        request_id = _incoming_request_id(request) or str(uuid.uuid4())
        request.state.request_id = request_id

        context: Dict[str, str] = {"request_id": request_id}
        game_id = _game_id(request.url.path)
        if game_id is not None:
            context["game_id"] = game_id

        logger.info(
            "%s %s",
            request.method,
            request.url.path,
            extra={**context, "method": request.method, "path": request.url.path},
        )

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        duration_ms = int((time.perf_counter() - start) * 1000)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d (%d ms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={**context, "status_code": response.status_code, "duration_ms": duration_ms},
        )
        return response
