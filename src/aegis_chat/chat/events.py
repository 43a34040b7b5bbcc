from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from aegis_chat.chat.models import Attachment, Message, Session, TokenUsage, utc_now

_ROLES = {"user", "assistant", "system"}


@dataclass(frozen=True)
class SessionsUpdated:
    sessions: tuple[Session, ...]


@dataclass(frozen=True)
class MessageReceived:
    message: Message
    session_key: str | None = None


@dataclass(frozen=True)
class ChunkReceived:
    message_id: str
    content: str
    media_url: str | None = None
    media_type: str | None = None
    session_key: str | None = None


@dataclass(frozen=True)
class Finalized:
    message_id: str
    content: str | None = None
    media_url: str | None = None
    media_type: str | None = None
    session_key: str | None = None


@dataclass(frozen=True)
class ConnectionChanged:
    connected: bool
    connecting: bool
    error: str | None = None


@dataclass(frozen=True)
class HistoryLoaded:
    messages: tuple[Message, ...]
    session_key: str | None = None


@dataclass(frozen=True)
class UsageUpdated:
    usage: TokenUsage | None


TransportEvent = Union[
    SessionsUpdated,
    MessageReceived,
    ChunkReceived,
    Finalized,
    ConnectionChanged,
    HistoryLoaded,
    UsageUpdated,
]


def _require(payload: dict[str, Any], key: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise ValueError(f"{payload.get('type', 'event')!r} event is missing {key!r}")
    return value


def _expect_object(value: Any, what: str) -> None:
    if not isinstance(value, dict):
        raise ValueError(f"Expected {what} to be a JSON object, got {type(value).__name__}")


def message_from_dict(data: dict[str, Any]) -> Message:
    _expect_object(data, "message")
    role = str(data.get("role", "assistant"))
    if role not in _ROLES:
        raise ValueError(f"Unsupported message role: {role!r}")
    attachments = tuple(
        Attachment(
            mime_type=str(a.get("mimeType", "")),
            content=str(a.get("content", "")),
            file_name=str(a.get("fileName", "")),
        )
        for a in data.get("attachments") or []
        if isinstance(a, dict)
    )
    return Message(
        id=str(_require(data, "id")),
        role=role,  # type: ignore[arg-type]
        content=str(data.get("content", "")),
        timestamp=str(data.get("timestamp") or utc_now()),
        is_streaming=bool(data.get("isStreaming", False)),
        media_url=data.get("mediaUrl") or None,
        media_type=data.get("mediaType") or None,
        attachments=attachments,
    )


def session_from_dict(data: dict[str, Any]) -> Session:
    _expect_object(data, "session")
    key = str(_require(data, "key"))
    unread = data.get("unread")
    return Session(
        key=key,
        label=str(data.get("label") or key),
        last_message=data.get("lastMessage"),
        last_timestamp=data.get("lastTimestamp"),
        unread=int(unread) if unread is not None else None,
        kind=data.get("kind"),
    )


def parse_event(payload: dict[str, Any]) -> TransportEvent:
    """Build a transport event from a JSON object carrying a ``type`` field.

    Raises ValueError for unknown types or missing required fields.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Event must be a JSON object, got {type(payload).__name__}")

    event_type = payload.get("type")
    session_key = payload.get("sessionKey") or None

    if event_type == "sessions":
        return SessionsUpdated(sessions=tuple(session_from_dict(s) for s in _require(payload, "sessions")))
    if event_type == "message":
        return MessageReceived(message=message_from_dict(_require(payload, "message")), session_key=session_key)
    if event_type == "chunk":
        return ChunkReceived(
            message_id=str(_require(payload, "id")),
            content=str(payload.get("content", "")),
            media_url=payload.get("mediaUrl") or None,
            media_type=payload.get("mediaType") or None,
            session_key=session_key,
        )
    if event_type == "final":
        content = payload.get("content")
        return Finalized(
            message_id=str(_require(payload, "id")),
            content=str(content) if content is not None else None,
            media_url=payload.get("mediaUrl") or None,
            media_type=payload.get("mediaType") or None,
            session_key=session_key,
        )
    if event_type == "status":
        return ConnectionChanged(
            connected=bool(payload.get("connected", False)),
            connecting=bool(payload.get("connecting", False)),
            error=payload.get("error") or None,
        )
    if event_type == "history":
        return HistoryLoaded(
            messages=tuple(message_from_dict(m) for m in _require(payload, "messages")),
            session_key=session_key,
        )
    if event_type == "usage":
        usage = payload.get("usage")
        if usage is None:
            return UsageUpdated(usage=None)
        _expect_object(usage, "usage")
        return UsageUpdated(
            usage=TokenUsage(
                context_tokens=int(usage.get("contextTokens", 0)),
                max_tokens=int(usage.get("maxTokens", 0)),
                percentage=int(usage.get("percentage", 0)),
                compactions=int(usage.get("compactions", 0)),
            )
        )

    raise ValueError(f"Unknown event type: {event_type!r}")
