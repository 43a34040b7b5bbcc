from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loguru import logger

from aegis_chat.chat.connection import ConnectionMonitor
from aegis_chat.chat.drafts import DraftCache
from aegis_chat.chat.events import (
    ChunkReceived,
    ConnectionChanged,
    Finalized,
    HistoryLoaded,
    MessageReceived,
    SessionsUpdated,
    TransportEvent,
    UsageUpdated,
)
from aegis_chat.chat.message_log import MessageLog
from aegis_chat.chat.models import MAIN_SESSION_KEY, ConnectionStatus, Message, Session, TokenUsage
from aegis_chat.chat.registry import SessionRegistry
from aegis_chat.chat.stream import StreamReconciler
from aegis_chat.chat.tabs import TabManager, tab_label


@dataclass(frozen=True)
class ChatSnapshot:
    active_key: str
    messages: tuple[Message, ...]
    open_tabs: tuple[str, ...]
    sessions: tuple[Session, ...]
    draft: str
    is_typing: bool
    is_sending: bool
    is_loading_history: bool
    token_usage: TokenUsage | None
    connection: ConnectionStatus


class ChatStore:
    """Owns all chat session state for one application shell.

    Transport callbacks go through ``dispatch``; user actions call the
    operations directly; presentation reads ``snapshot()``.
    """

    def __init__(
        self,
        *,
        main_key: str = MAIN_SESSION_KEY,
        main_label: str = "Main session",
        tab_label_max_chars: int = 24,
        discard_partial_on_close: bool = False,
    ):
        self._main_label = main_label
        self._tab_label_max_chars = tab_label_max_chars
        self._discard_partial_on_close = discard_partial_on_close

        self._log = MessageLog(main_key)
        self._stream = StreamReconciler(self._log)
        self._registry = SessionRegistry(self._log, self._stream)
        self._tabs = TabManager(self._registry, main_key=main_key)
        self._drafts = DraftCache()
        self._connection = ConnectionMonitor()

        self._token_usage: TokenUsage | None = None
        self._sending = False
        self._loading_history = False

    # -- reads --

    @property
    def main_key(self) -> str:
        return self._tabs.main_key

    @property
    def active_key(self) -> str:
        return self._registry.active_key

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._log.messages

    def messages_for(self, session_key: str) -> tuple[Message, ...]:
        return self._log.messages_for(session_key)

    @property
    def open_tabs(self) -> tuple[str, ...]:
        return self._tabs.open_tabs

    @property
    def sessions(self) -> tuple[Session, ...]:
        return self._registry.sessions

    @property
    def is_typing(self) -> bool:
        return self._stream.is_typing

    @property
    def is_sending(self) -> bool:
        return self._sending

    @property
    def is_loading_history(self) -> bool:
        return self._loading_history

    @property
    def token_usage(self) -> TokenUsage | None:
        return self._token_usage

    @property
    def connection(self) -> ConnectionStatus:
        return self._connection.status

    def snapshot(self) -> ChatSnapshot:
        return ChatSnapshot(
            active_key=self.active_key,
            messages=self.messages,
            open_tabs=self.open_tabs,
            sessions=self.sessions,
            draft=self._drafts.get_draft(self.active_key),
            is_typing=self.is_typing,
            is_sending=self._sending,
            is_loading_history=self._loading_history,
            token_usage=self._token_usage,
            connection=self._connection.status,
        )

    def tab_labels(self) -> list[tuple[str, str]]:
        return [
            (
                key,
                tab_label(
                    self._registry.get(key),
                    key,
                    main_key=self.main_key,
                    main_label=self._main_label,
                    max_chars=self._tab_label_max_chars,
                ),
            )
            for key in self._tabs.open_tabs
        ]

    # -- tabs & sessions --

    def open_tab(self, key: str) -> None:
        self._tabs.open(key)

    def close_tab(self, key: str) -> bool:
        closed = self._tabs.close(key)
        if closed and self._discard_partial_on_close:
            self._log.discard_streaming(key)
        return closed

    def reorder_tabs(self, new_order: Sequence[str]) -> bool:
        return self._tabs.reorder(new_order)

    def cycle_tab(self, *, backwards: bool = False) -> str:
        return self._tabs.cycle(backwards=backwards)

    def set_active_session(self, key: str) -> None:
        self._tabs.open(key)

    def set_sessions(self, sessions: Iterable[Session]) -> None:
        self._registry.set_sessions(sessions)

    def forget_session(self, key: str) -> None:
        """Drop cached messages and draft for a session whose tab is closed."""
        if self._tabs.is_open(key):
            logger.warning(f"Not forgetting session {key!r}: its tab is still open")
            return
        self._log.forget(key)
        self._drafts.clear_draft(key)

    # -- messages --

    def add_message(self, message: Message, *, session_key: str | None = None) -> bool:
        return self._log.append(message, session_key=session_key)

    def set_messages(self, messages: Iterable[Message], *, session_key: str | None = None) -> None:
        self._log.replace_all(messages, session_key=session_key)

    def clear_messages(self, *, session_key: str | None = None) -> None:
        self._log.clear(session_key=session_key)

    def update_streaming_message(
        self,
        message_id: str,
        content: str,
        *,
        media_url: str | None = None,
        media_type: str | None = None,
        session_key: str | None = None,
    ) -> Message | None:
        return self._stream.on_chunk(
            message_id, content, media_url=media_url, media_type=media_type, session_key=session_key
        )

    def finalize_streaming_message(
        self,
        message_id: str,
        content: str | None = None,
        *,
        media_url: str | None = None,
        media_type: str | None = None,
        session_key: str | None = None,
    ) -> Message | None:
        return self._stream.on_final(
            message_id, content, media_url=media_url, media_type=media_type, session_key=session_key
        )

    # -- drafts --

    def set_draft(self, key: str, text: str) -> None:
        self._drafts.set_draft(key, text)

    def get_draft(self, key: str) -> str:
        return self._drafts.get_draft(key)

    def clear_draft(self, key: str) -> None:
        self._drafts.clear_draft(key)

    # -- flags --

    def set_token_usage(self, usage: TokenUsage | None) -> None:
        self._token_usage = usage

    def set_typing(self, typing: bool) -> None:
        self._stream.set_typing(typing)

    def set_sending(self, sending: bool) -> None:
        self._sending = sending

    def set_loading_history(self, loading: bool) -> None:
        self._loading_history = loading

    def set_connection_status(self, connected: bool, connecting: bool, error: str | None = None) -> ConnectionStatus:
        return self._connection.set_status(connected, connecting, error)

    # -- transport events --

    def dispatch(self, event: TransportEvent) -> None:
        if isinstance(event, ChunkReceived):
            self.update_streaming_message(
                event.message_id,
                event.content,
                media_url=event.media_url,
                media_type=event.media_type,
                session_key=event.session_key,
            )
        elif isinstance(event, Finalized):
            self.finalize_streaming_message(
                event.message_id,
                event.content,
                media_url=event.media_url,
                media_type=event.media_type,
                session_key=event.session_key,
            )
        elif isinstance(event, MessageReceived):
            self._stream.clear_indicator()
            self.add_message(event.message, session_key=event.session_key)
        elif isinstance(event, SessionsUpdated):
            self.set_sessions(event.sessions)
        elif isinstance(event, HistoryLoaded):
            self.set_messages(event.messages, session_key=event.session_key)
            # the flag tracks the visible session's history only
            if event.session_key in (None, self.active_key):
                self._loading_history = False
        elif isinstance(event, ConnectionChanged):
            self.set_connection_status(event.connected, event.connecting, event.error)
        elif isinstance(event, UsageUpdated):
            self.set_token_usage(event.usage)
        else:
            logger.warning(f"Ignoring unsupported transport event: {type(event).__name__}")
