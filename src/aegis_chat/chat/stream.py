from __future__ import annotations

from aegis_chat.chat.message_log import MessageLog
from aegis_chat.chat.models import Message


class StreamReconciler:
    """Drives an assistant turn through streaming to final on top of a MessageLog.

    ``is_typing`` is the user-facing "assistant is producing output" signal for
    the active session. It is not tied to any one message id: any finalize
    clears it, and so does switching sessions.
    """

    def __init__(self, log: MessageLog):
        self._log = log
        self._typing = False

    @property
    def is_typing(self) -> bool:
        return self._typing

    @property
    def phase(self) -> str:
        return "streaming" if self._typing else "idle"

    def set_typing(self, typing: bool) -> None:
        self._typing = typing

    def clear_indicator(self) -> None:
        self._typing = False

    def on_chunk(
        self,
        message_id: str,
        content: str,
        *,
        media_url: str | None = None,
        media_type: str | None = None,
        session_key: str | None = None,
    ) -> Message | None:
        key = self._log.resolve_session(message_id, session_key)
        message = self._log.upsert_streaming(
            message_id,
            content,
            media_url=media_url,
            media_type=media_type,
            session_key=key,
        )
        if message is not None and key == self._log.active_key:
            self._typing = True
        return message

    def on_final(
        self,
        message_id: str,
        content: str | None = None,
        *,
        media_url: str | None = None,
        media_type: str | None = None,
        session_key: str | None = None,
    ) -> Message | None:
        message = self._log.finalize(
            message_id,
            content,
            media_url=media_url,
            media_type=media_type,
            session_key=session_key,
        )
        self._typing = False
        return message

    def in_flight(self, session_key: str | None = None) -> list[str]:
        key = session_key or self._log.active_key
        return [m.id for m in self._log.messages_for(key) if m.is_streaming]
