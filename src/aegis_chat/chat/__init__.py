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
    parse_event,
)
from aegis_chat.chat.message_log import MessageLog
from aegis_chat.chat.models import (
    MAIN_SESSION_KEY,
    Attachment,
    ConnectionStatus,
    Message,
    Session,
    TokenUsage,
)
from aegis_chat.chat.registry import SessionRegistry
from aegis_chat.chat.store import ChatSnapshot, ChatStore
from aegis_chat.chat.stream import StreamReconciler
from aegis_chat.chat.tabs import TabManager, tab_label

__all__ = [
    "MAIN_SESSION_KEY",
    "Attachment",
    "ChatSnapshot",
    "ChatStore",
    "ChunkReceived",
    "ConnectionChanged",
    "ConnectionMonitor",
    "ConnectionStatus",
    "DraftCache",
    "Finalized",
    "HistoryLoaded",
    "Message",
    "MessageLog",
    "MessageReceived",
    "Session",
    "SessionRegistry",
    "SessionsUpdated",
    "StreamReconciler",
    "TabManager",
    "TokenUsage",
    "TransportEvent",
    "UsageUpdated",
    "parse_event",
    "tab_label",
]
