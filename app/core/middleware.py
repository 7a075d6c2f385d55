"""
HTTP middleware: request correlation, access logging and request deadline.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.utils.logging_config import request_id_var

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Reuse the caller's X-Request-ID (or mint one), expose it to logging and
    echo it on the response, then log the request with its duration.
    """

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "%s %s -> %s (%.2fms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
            return response
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                "%s %s failed after %.2fms", request.method, request.url.path, duration_ms
            )
            raise
        finally:
            request_id_var.reset(token)


class RequestTimeoutMiddleware:
    """
    Cancel the downstream app once ``timeout_seconds`` elapse and answer 504.

    The endpoint runs inside the awaited coroutine, so the cancellation
    reaches whatever it is awaiting, including an in-flight database query.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(
                "%s %s timed out after %ss",
                scope.get("method"),
                scope.get("path"),
                self.timeout_seconds,
            )
            # Si ya salieron las cabeceras no se puede cambiar el status
            if response_started:
                raise
            response = JSONResponse(status_code=504, content={"detail": "request timed out"})
            await response(scope, receive, send)
