from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from aegis_chat.chat.message_log import MessageLog
from aegis_chat.chat.models import Message, Session
from aegis_chat.chat.stream import StreamReconciler


class SessionRegistry:
    def __init__(self, log: MessageLog, stream: StreamReconciler):
        self._log = log
        self._stream = stream
        self._sessions: tuple[Session, ...] = ()

    @property
    def sessions(self) -> tuple[Session, ...]:
        return self._sessions

    @property
    def active_key(self) -> str:
        return self._log.active_key

    def get(self, session_key: str) -> Session | None:
        for session in self._sessions:
            if session.key == session_key:
                return session
        return None

    def set_sessions(self, sessions: Iterable[Session]) -> None:
        self._sessions = tuple(sessions)
        logger.debug(f"Session catalog refreshed ({len(self._sessions)} sessions)")

    def set_active(self, session_key: str) -> tuple[Message, ...]:
        """Switch the visible log to ``session_key``.

        Keys missing from the catalog are accepted; they show an empty log until
        history arrives. The typing indicator never follows a switch.
        """
        previous = self._log.active_key
        messages = self._log.activate(session_key)
        self._stream.clear_indicator()
        if previous != session_key:
            logger.debug(f"Active session {previous!r} -> {session_key!r} ({len(messages)} cached messages)")
        return messages
