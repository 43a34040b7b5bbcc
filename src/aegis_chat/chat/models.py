from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

Role = Literal["user", "assistant", "system"]

MAIN_SESSION_KEY = "agent:main:main"


def utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


@dataclass(frozen=True)
class Attachment:
    mime_type: str
    content: str
    file_name: str


@dataclass(frozen=True)
class Message:
    id: str
    role: Role
    content: str
    timestamp: str
    is_streaming: bool = False
    media_url: str | None = None
    media_type: str | None = None
    attachments: tuple[Attachment, ...] = ()


@dataclass(frozen=True)
class Session:
    key: str
    label: str
    last_message: str | None = None
    last_timestamp: str | None = None
    unread: int | None = None
    kind: str | None = None


@dataclass(frozen=True)
class TokenUsage:
    context_tokens: int
    max_tokens: int
    percentage: int
    compactions: int

    def __post_init__(self) -> None:
        for name in ("context_tokens", "max_tokens", "percentage", "compactions"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")


@dataclass(frozen=True)
class ConnectionStatus:
    connected: bool = False
    connecting: bool = False
    error: str | None = None
