from __future__ import annotations

import asyncio
import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from imghost.api.fastapi.middleware.errors.handlers import error_response

logger = logging.getLogger(__name__)

DEFAULT_READ_TIMEOUT_SECONDS = 15.0
DEFAULT_WRITE_TIMEOUT_SECONDS = 15.0


class HandlerTimeoutMiddleware:
    """
    Caps total handler execution time. If exceeded before the response has
    started, returns 504; once bytes are on the wire the response is cut off.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float | None = None) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds or DEFAULT_WRITE_TIMEOUT_SECONDS

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def _send(message: Message) -> None:
            nonlocal started
            if message.get("type") == "http.response.start":
                started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, _send), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            path = scope.get("path", "")
            if started:
                logger.error("Response for %s timed out after %.1fs mid-stream", path, self.timeout_seconds)
                return
            logger.error("Handler for %s timed out after %.1fs", path, self.timeout_seconds)
            resp = error_response(504, "The request took too long to complete")
            await resp(scope, receive, send)


class BodyReadTimeoutMiddleware:
    """
    Enforces a timeout while reading the request body to mitigate slowloris.
    If body read does not make progress within the timeout, returns 408.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float | None = None) -> None:
        self.app = app
        self.timeout_seconds = timeout_seconds or DEFAULT_READ_TIMEOUT_SECONDS

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        body_complete = False
        started = False
        timed_out = False

        async def _timeout_receive() -> Message:
            nonlocal body_complete, timed_out
            # after the body, receive() only waits for disconnect: no deadline
            if body_complete:
                return await receive()
            try:
                message = await asyncio.wait_for(receive(), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                if not started:
                    # answer now; frameworks may wrap the error into their own 400
                    timed_out = True
                    logger.warning("Timed out reading body for %s", scope.get("path", ""))
                    resp = error_response(408, "Timed out while reading request body")
                    await resp(scope, receive, send)
                raise
            if message.get("type") == "http.request" and not message.get("more_body", False):
                body_complete = True
            return message

        async def _send(message: Message) -> None:
            nonlocal started
            if timed_out:
                return
            if message.get("type") == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, _timeout_receive, _send)
        except asyncio.TimeoutError:
            if not timed_out:
                raise
