from __future__ import annotations

from typing import Any

from loguru import logger

from aegis_chat.app_config import AppConfig
from aegis_chat.chat.events import (
    ChunkReceived,
    ConnectionChanged,
    Finalized,
    HistoryLoaded,
    MessageReceived,
    SessionsUpdated,
    UsageUpdated,
)
from aegis_chat.chat.models import Message
from aegis_chat.chat.normalize import normalize_history, normalize_sessions, parse_token_usage
from aegis_chat.chat.store import ChatStore


class GatewayBridge:
    """Transport callbacks feeding a ChatStore.

    Raw gateway listings are shaped here before they reach the store; the store
    itself only sees typed events.
    """

    def __init__(self, store: ChatStore, app: AppConfig):
        self._store = store
        self._app = app

    def on_message(self, message: Message, *, session_key: str | None = None) -> None:
        self._store.dispatch(MessageReceived(message=message, session_key=session_key))

    def on_stream_chunk(
        self,
        message_id: str,
        content: str,
        media: dict[str, Any] | None = None,
        *,
        session_key: str | None = None,
    ) -> None:
        media = media or {}
        self._store.dispatch(
            ChunkReceived(
                message_id=message_id,
                content=content,
                media_url=media.get("mediaUrl"),
                media_type=media.get("mediaType"),
                session_key=session_key,
            )
        )

    def on_stream_end(
        self,
        message_id: str,
        content: str | None = None,
        media: dict[str, Any] | None = None,
        *,
        session_key: str | None = None,
    ) -> None:
        media = media or {}
        self._store.dispatch(
            Finalized(
                message_id=message_id,
                content=content,
                media_url=media.get("mediaUrl"),
                media_type=media.get("mediaType"),
                session_key=session_key,
            )
        )

    def on_status_change(self, connected: bool, connecting: bool, error: str | None = None) -> None:
        self._store.dispatch(ConnectionChanged(connected=connected, connecting=connecting, error=error))

    def on_sessions_listing(self, raw: Any) -> None:
        sessions = normalize_sessions(
            raw,
            main_key=self._app.main_session_key,
            main_label=self._app.main_session_label,
            preview_chars=self._app.preview_chars,
        )
        if not sessions:
            logger.debug("Gateway returned no sessions; keeping current catalog")
        else:
            self._store.dispatch(SessionsUpdated(sessions=tuple(sessions)))

        usage = parse_token_usage(
            raw,
            main_key=self._app.main_session_key,
            default_max_tokens=self._app.default_max_tokens,
        )
        if usage is not None:
            self._store.dispatch(UsageUpdated(usage=usage))

    def begin_history_load(self) -> None:
        self._store.set_loading_history(True)

    def on_history(self, raw: Any, *, session_key: str | None = None) -> int:
        raw_messages = raw.get("messages") if isinstance(raw, dict) else raw
        messages = normalize_history(raw_messages)
        self._store.dispatch(HistoryLoaded(messages=tuple(messages), session_key=session_key))
        return len(messages)
