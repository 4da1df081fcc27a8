"""HTTP transports for the Consultant Jobs MCP server.

This module exposes a Starlette application serving the MCP JSON-RPC
dispatcher over two wire forms: a stateless ``POST /mcp`` endpoint and a
server-sent events stream at ``GET /sse`` whose clients post their messages to
``/sse/message/{session_id}``. Every response carries permissive CORS headers
so browser-hosted MCP clients can read the ``mcp-session-id`` header.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import AsyncIterator, Optional

import mcp.types as types
from sse_starlette.sse import EventSourceResponse, ServerSentEvent
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import ASGIApp, Receive, Scope, Send

from config_utils import get_keepalive_interval, get_log_level
from consultant_server import AssignmentTools
from health import health_check
from jsonrpc_dispatcher import JsonRpcDispatcher, error
from session_manager import SessionManager

logger = logging.getLogger("consultant-http-server")

SESSION_HEADER = "mcp-session-id"
SSE_SEPARATOR = "\n"


def _cors_headers() -> list[tuple[bytes, bytes]]:
    """Headers applied to every HTTP response."""
    return [
        (b"access-control-allow-origin", b"*"),
        (b"access-control-allow-methods", b"GET, POST, DELETE, OPTIONS"),
        (b"access-control-allow-headers", b"Content-Type, mcp-session-id"),
        (b"access-control-expose-headers", b"mcp-session-id"),
    ]


def _cors_preflight_headers() -> list[tuple[bytes, bytes]]:
    """Headers returned for CORS preflight responses."""
    headers = list(_cors_headers())
    headers.append((b"access-control-max-age", b"86400"))
    return headers


def _merge_headers(
    existing: list[tuple[bytes, bytes]], additions: list[tuple[bytes, bytes]]
) -> list[tuple[bytes, bytes]]:
    """Merge HTTP headers while overriding duplicates using case-insensitive keys."""

    header_map: dict[bytes, tuple[bytes, bytes]] = {
        key.lower(): (key, value) for key, value in existing
    }
    for key, value in additions:
        header_map[key.lower()] = (key, value)
    return list(header_map.values())


class CORSMiddleware:
    """Answers preflight requests and adds CORS headers to every response."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope.get("method", "GET").upper() == "OPTIONS":
            logger.debug("Handling CORS preflight for %s", scope.get("path"))
            await send(
                {
                    "type": "http.response.start",
                    "status": 204,
                    "headers": _cors_preflight_headers(),
                }
            )
            await send({"type": "http.response.body", "body": b""})
            return

        async def send_with_cors(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                message["headers"] = _merge_headers(headers, _cors_headers())
            await send(message)

        await self.app(scope, receive, send_with_cors)


def _parse_error() -> JSONResponse:
    return JSONResponse(error(None, types.PARSE_ERROR, "Parse error"), status_code=400)


async def _read_message(request: Request) -> Optional[dict]:
    """Decode the request body as a JSON-RPC object, or ``None`` if it is not one."""
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


async def sse_event_stream(message_url: str) -> AsyncIterator[dict]:
    """Yield the ``endpoint`` event, then hold the stream open.

    Keep-alive comments are written by :class:`EventSourceResponse`; the
    generator is cancelled once the peer disconnects.
    """
    yield {"event": "endpoint", "data": message_url}
    try:
        await asyncio.Event().wait()
    finally:
        logger.info("SSE stream for %s closed", message_url)


def _ping_comment() -> ServerSentEvent:
    return ServerSentEvent(comment="ping", sep=SSE_SEPARATOR)


def create_app(
    dispatcher: Optional[JsonRpcDispatcher] = None,
    keepalive_interval: Optional[float] = None,
) -> Starlette:
    """Create a Starlette application exposing the MCP server over HTTP."""

    if dispatcher is None:
        dispatcher = JsonRpcDispatcher(AssignmentTools(), SessionManager())
    sessions = dispatcher.sessions
    interval = keepalive_interval or get_keepalive_interval()

    async def homepage(request: Request):
        return JSONResponse(
            {
                "status": "ok",
                "message": "Consultant Jobs MCP HTTP endpoint",
                "endpoints": {
                    "mcp": "/mcp",
                    "sse": "/sse",
                    "health": "/health",
                },
            }
        )

    async def health(request: Request):
        return JSONResponse(health_check())

    async def mcp_endpoint(request: Request):
        message = await _read_message(request)
        if message is None:
            return _parse_error()

        reply = await dispatcher.dispatch(request.headers.get(SESSION_HEADER), message)
        if reply is None:
            return Response(status_code=204)

        headers = {SESSION_HEADER: reply.session_id} if reply.session_id else None
        return JSONResponse(reply.body, headers=headers)

    async def sse_endpoint(request: Request):
        session_id = sessions.create_session()
        message_url = str(request.url.replace(path=f"/sse/message/{session_id}", query=""))
        logger.info("Opened SSE stream for session %s", session_id)
        return EventSourceResponse(
            sse_event_stream(message_url),
            headers={"Cache-Control": "no-cache"},
            ping=interval,
            sep=SSE_SEPARATOR,
            ping_message_factory=_ping_comment,
        )

    async def sse_message(request: Request):
        message = await _read_message(request)
        if message is None:
            return _parse_error()

        reply = await dispatcher.dispatch(request.path_params["session_id"], message)
        if reply is None:
            return Response(status_code=204)
        return JSONResponse(reply.body)

    async def not_found(request: Request, exc: Exception):
        return JSONResponse(
            {"error": "Not found", "endpoints": {"mcp": "/mcp (POST)", "health": "/health"}},
            status_code=404,
        )

    routes = [
        Route("/", homepage, methods=["GET"]),
        Route("/health", health, methods=["GET", "POST", "PUT", "PATCH", "DELETE"]),
        Route("/mcp", mcp_endpoint, methods=["POST"]),
        Route("/sse", sse_endpoint, methods=["GET"]),
        Route("/sse/message/{session_id}", sse_message, methods=["POST"]),
    ]

    return Starlette(
        routes=routes,
        middleware=[Middleware(CORSMiddleware)],
        exception_handlers={404: not_found, 405: not_found},
    )


app = create_app()


def main() -> None:
    import uvicorn

    log_level = get_log_level()
    logging.basicConfig(level=log_level)

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    logger.info("Starting Consultant Jobs MCP HTTP server on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    main()
