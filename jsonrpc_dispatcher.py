"""JSON-RPC 2.0 method dispatch for the MCP endpoints.

Both HTTP transports hand decoded request objects to :class:`JsonRpcDispatcher`.
The dispatcher never raises: failures become JSON-RPC error envelopes, and
notifications (requests without an ``id``) produce no reply at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import mcp.types as types

from assignment_models import UnknownToolError
from consultant_server import AssignmentTools
from session_manager import SessionManager
from tool_registry import list_tools

logger = logging.getLogger("consultant-jobs-server")

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "consultant-jobs"
SERVER_VERSION = "1.0.0"


@dataclass
class JsonRpcReply:
    """A response envelope plus the session id to send back as a transport header."""

    body: Dict[str, Any]
    session_id: Optional[str] = None


def success(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def error(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


MethodHandler = Callable[[Optional[str], Any, Dict[str, Any]], Awaitable[Optional[JsonRpcReply]]]


class JsonRpcDispatcher:
    """Routes MCP methods to their handlers."""

    def __init__(self, tools: AssignmentTools, sessions: SessionManager):
        self.tools = tools
        self.sessions = sessions
        self._methods: Dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "notifications/initialized": self._initialized,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "ping": self._ping,
        }

    async def dispatch(self, session_id: Optional[str], request: Dict[str, Any]) -> Optional[JsonRpcReply]:
        """Handle one decoded request; ``None`` means nothing is sent back."""
        request_id = request.get("id")
        method = request.get("method")

        try:
            handler = self._methods.get(method)
            if handler is None:
                reply = JsonRpcReply(
                    error(request_id, types.METHOD_NOT_FOUND, f"Method not found: {method}")
                )
            else:
                reply = await handler(session_id, request_id, request.get("params"))
        except Exception as e:
            logger.exception("Error handling JSON-RPC method %s", method)
            reply = JsonRpcReply(error(request_id, types.INTERNAL_ERROR, str(e) or "Internal error"))

        if "id" not in request:
            return None
        return reply

    async def _initialize(self, session_id, request_id, params) -> JsonRpcReply:
        active_session = self.sessions.initialize_session(session_id)
        logger.info("Initialized session %s", active_session)
        result = {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        }
        return JsonRpcReply(success(request_id, result), session_id=active_session)

    async def _initialized(self, session_id, request_id, params) -> None:
        return None

    async def _list_tools(self, session_id, request_id, params) -> JsonRpcReply:
        return JsonRpcReply(success(request_id, {"tools": list_tools()}))

    async def _call_tool(self, session_id, request_id, params) -> JsonRpcReply:
        if not isinstance(params, dict):
            raise TypeError("tools/call requires params with a tool name")

        name = params.get("name")
        try:
            result = await self.tools.call(name, params.get("arguments"))
        except UnknownToolError as e:
            return JsonRpcReply(error(request_id, types.METHOD_NOT_FOUND, str(e)))
        return JsonRpcReply(success(request_id, result))

    async def _ping(self, session_id, request_id, params) -> JsonRpcReply:
        return JsonRpcReply(success(request_id, {}))
