import logging
import os
import time
import uuid
from typing import Callable
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

# Configure root logger once (simple, readable format)
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("echo_insight.request")

# Probes hit these constantly; keep them at DEBUG
QUIET_PATHS = {"/", "/health/env"}


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        client = request.client.host if request.client else "-"
        path = request.url.path
        upload_bytes = request.headers.get("content-length", "-")

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "rid=%s client=%s %s %s bytes=%s status=500 duration_ms=%.2f UNHANDLED",
                rid, client, request.method, path, upload_bytes,
                (time.perf_counter() - start) * 1000.0,
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000.0
        response.headers["X-Request-Id"] = rid
        response.headers["X-Process-Time-Ms"] = f"{duration_ms:.2f}"
        level = logging.DEBUG if path in QUIET_PATHS else logging.INFO
        logger.log(
            level,
            "rid=%s client=%s %s %s bytes=%s status=%s duration_ms=%.2f",
            rid, client, request.method, path, upload_bytes, response.status_code, duration_ms,
        )
        return response


def register_request_logging(app: FastAPI):
    app.add_middleware(RequestLogMiddleware)
