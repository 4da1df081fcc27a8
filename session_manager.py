#!/usr/bin/env python3
"""Session bookkeeping for MCP connections."""

import logging
import uuid
from typing import List, Optional, Set

logger = logging.getLogger(__name__)


class SessionManager:
    """Tracks session ids handed out by ``initialize`` and the SSE transport.

    Sessions carry no data beyond their id and are never expired; the set lives
    as long as the process. Replicas do not share it, so it is bookkeeping for
    protocol compliance rather than a source of truth. Deployments that need
    eviction have to add an expiry policy here.
    """

    def __init__(self):
        self.sessions: Set[str] = set()

    def create_session(self) -> str:
        """
        Mint and register a new session

        Returns:
            The new session ID
        """
        session_id = str(uuid.uuid4())
        self.register(session_id)
        return session_id

    def register(self, session_id: str) -> str:
        if session_id not in self.sessions:
            logger.debug("Registering session %s", session_id)
        self.sessions.add(session_id)
        return session_id

    def initialize_session(self, session_id: Optional[str] = None) -> str:
        """Reuse ``session_id`` when the caller supplied one, otherwise mint a new one."""
        if session_id:
            return self.register(session_id)
        return self.create_session()

    def contains(self, session_id: str) -> bool:
        return session_id in self.sessions

    def list_active_sessions(self) -> List[str]:
        """List all known session IDs"""
        return sorted(self.sessions)

    def __len__(self) -> int:
        return len(self.sessions)
