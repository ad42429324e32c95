"""
backend/trainerhub/middleware/logging.py

Purpose:
    Access logging for the API. Every request produces one JSON line on the
    ``trainerhub.access`` logger carrying the request id, the authenticated
    user (when a route resolved one) and the timing. ``setup_logging`` is the
    single place the process configures the root logger.

Dependencies:
    - starlette (middleware base)
    - trainerhub.config
"""

import hashlib
import json
import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from trainerhub.config import settings

logger = logging.getLogger("trainerhub.access")

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _request_id(request: Request) -> str:
    """Reuse a well-formed incoming request id, otherwise mint a short one."""
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if _REQUEST_ID_RE.match(incoming):
        return incoming
    return uuid.uuid4().hex[:8]


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id
        start = time.perf_counter()

        response: Response = await call_next(request)

        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "user_id": getattr(request.state, "user_id", None),
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            "client_ip_hash": hashlib.sha256(
                (request.client.host or "").encode()
            ).hexdigest()[:12] if request.client else None,
        }
        logger.log(_level_for(response.status_code), json.dumps(log_data))

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    # The access middleware already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
