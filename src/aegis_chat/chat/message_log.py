from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from loguru import logger

from aegis_chat.chat.models import Message, utc_now


class MessageLog:
    """Ordered message caches, one per session key.

    Exactly one key is active; its log is what ``messages`` returns. Every
    mutation replaces the affected list wholesale, so tuples handed out by
    ``messages``/``messages_for`` never change under a reader.

    A mutation is applied to the log named by an explicit ``session_key``;
    without one, to the log that already holds the message id (the active log
    is searched first); otherwise to the active log at call time.
    """

    def __init__(self, active_key: str):
        self._active_key = active_key
        self._logs: dict[str, list[Message]] = {}

    @property
    def active_key(self) -> str:
        return self._active_key

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.messages_for(self._active_key)

    def messages_for(self, session_key: str) -> tuple[Message, ...]:
        return tuple(self._logs.get(session_key, ()))

    def session_keys(self) -> list[str]:
        return list(self._logs)

    def activate(self, session_key: str) -> tuple[Message, ...]:
        self._active_key = session_key
        return self.messages

    def find(self, message_id: str, *, session_key: str | None = None) -> Message | None:
        key = self.resolve_session(message_id, session_key)
        index = self._index_of(key, message_id)
        if index is None:
            return None
        return self._logs[key][index]

    def append(self, message: Message, *, session_key: str | None = None) -> bool:
        key = session_key or self._active_key
        if self._index_of(key, message.id) is not None:
            logger.debug(f"Ignoring duplicate message {message.id!r} for session {key!r}")
            return False
        self._logs[key] = [*self._logs.get(key, ()), message]
        return True

    def upsert_streaming(
        self,
        message_id: str,
        content: str,
        *,
        media_url: str | None = None,
        media_type: str | None = None,
        session_key: str | None = None,
    ) -> Message | None:
        key = self.resolve_session(message_id, session_key)
        current = list(self._logs.get(key, ()))
        index = self._index_of(key, message_id)

        if index is None:
            message = Message(
                id=message_id,
                role="assistant",
                content=content,
                timestamp=utc_now(),
                is_streaming=True,
            )
            message = _with_media(message, media_url, media_type)
            current.append(message)
        else:
            existing = current[index]
            if not existing.is_streaming:
                logger.debug(f"Ignoring chunk for finalized message {message_id!r} in session {key!r}")
                return None
            message = _with_media(replace(existing, content=content, is_streaming=True), media_url, media_type)
            current[index] = message

        self._logs[key] = current
        return message

    def finalize(
        self,
        message_id: str,
        content: str | None = None,
        *,
        media_url: str | None = None,
        media_type: str | None = None,
        session_key: str | None = None,
    ) -> Message | None:
        key = self.resolve_session(message_id, session_key)
        index = self._index_of(key, message_id)
        if index is None:
            logger.debug(f"Finalize for unknown message {message_id!r} in session {key!r}")
            return None

        current = list(self._logs[key])
        existing = current[index]
        message = replace(existing, content=content or existing.content, is_streaming=False)
        message = _with_media(message, media_url, media_type)
        current[index] = message
        self._logs[key] = current
        return message

    def replace_all(self, messages: Iterable[Message], *, session_key: str | None = None) -> None:
        key = session_key or self._active_key
        deduped: list[Message] = []
        seen: set[str] = set()
        for message in messages:
            if message.id in seen:
                continue
            seen.add(message.id)
            deduped.append(message)
        self._logs[key] = deduped

    def clear(self, *, session_key: str | None = None) -> None:
        self._logs[session_key or self._active_key] = []

    def discard_streaming(self, session_key: str) -> int:
        current = self._logs.get(session_key)
        if not current:
            return 0
        kept = [m for m in current if not m.is_streaming]
        dropped = len(current) - len(kept)
        if dropped:
            self._logs[session_key] = kept
            logger.debug(f"Discarded {dropped} unfinalized message(s) for session {session_key!r}")
        return dropped

    def forget(self, session_key: str) -> None:
        self._logs.pop(session_key, None)

    def resolve_session(self, message_id: str, session_key: str | None = None) -> str:
        if session_key:
            return session_key
        if self._index_of(self._active_key, message_id) is not None:
            return self._active_key
        for key in self._logs:
            if key != self._active_key and self._index_of(key, message_id) is not None:
                return key
        return self._active_key

    def _index_of(self, session_key: str, message_id: str) -> int | None:
        for i, message in enumerate(self._logs.get(session_key, ())):
            if message.id == message_id:
                return i
        return None


def _with_media(message: Message, media_url: str | None, media_type: str | None) -> Message:
    if not media_url:
        return message
    return replace(message, media_url=media_url, media_type=media_type)
