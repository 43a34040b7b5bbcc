"""Shape raw gateway payloads into the records the chat store keeps."""

from __future__ import annotations

import json
import re
from typing import Any
from uuid import uuid4

from aegis_chat.chat.models import MAIN_SESSION_KEY, Message, Session, TokenUsage, utc_now

_NOISE_PATTERNS = [
    re.compile(r"^Read HEARTBEAT\.md", re.IGNORECASE),
    re.compile(r"^HEARTBEAT_OK"),
    re.compile(r"^NO_REPLY$"),
    re.compile(r"^⚠️ Session nearing compaction"),
    re.compile(r"^\[System\]", re.IGNORECASE),
    re.compile(r"^System:\s*\["),
]

_TOOL_BLOCK_TYPES = {"toolCall", "toolResult", "tool_use", "tool_result"}


def _raw_sessions(raw: Any) -> list[dict]:
    if isinstance(raw, dict):
        raw = raw.get("sessions")
    if not isinstance(raw, list):
        return []
    return [s for s in raw if isinstance(s, dict)]


def _first_present(entry: dict, *keys: str, default: Any) -> Any:
    # an explicit 0 is a value, only missing/null falls through
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return default


def extract_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, list):
        parts: list[str] = []
        for block in value:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and isinstance(block.get("text"), str):
                parts.append(block["text"])
        return "".join(parts)
    if isinstance(value, dict):
        if isinstance(value.get("text"), str):
            return value["text"]
        if isinstance(value.get("content"), str):
            return value["content"]
        if isinstance(value.get("content"), list):
            return extract_text(value["content"])
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def is_noise(text: str) -> bool:
    trimmed = text.strip()
    if not trimmed:
        return True
    return any(p.search(trimmed) for p in _NOISE_PATTERNS)


def normalize_sessions(
    raw: Any,
    *,
    main_key: str = MAIN_SESSION_KEY,
    main_label: str = "Main session",
    preview_chars: int = 60,
) -> list[Session]:
    """Turn a gateway session listing into catalog entries, main session first."""
    sessions: list[Session] = []
    for entry in _raw_sessions(raw):
        key = entry.get("key") or entry.get("sessionKey")
        if not key:
            continue
        key = str(key)
        tail = key.split(":")[-1]

        if key == main_key:
            label = main_label
        elif key.startswith("agent:main:"):
            label = tail
        elif entry.get("kind") == "isolated":
            label = f"🔄 {entry.get('label') or tail}"
        else:
            label = str(entry.get("label") or entry.get("name") or key)

        last = entry.get("lastMessage")
        last_message = None
        last_timestamp = entry.get("updatedAt")
        if isinstance(last, dict):
            content = last.get("content")
            if content:
                last_message = (content if isinstance(content, str) else "")[:preview_chars]
            last_timestamp = last.get("timestamp") or last_timestamp

        unread = entry.get("unread")
        sessions.append(
            Session(
                key=key,
                label=label,
                last_message=last_message,
                last_timestamp=last_timestamp,
                unread=int(unread) if isinstance(unread, (int, float)) else None,
                kind=entry.get("kind"),
            )
        )

    # sorted() is stable, so non-main sessions keep gateway order
    return sorted(sessions, key=lambda s: s.key != main_key)


def parse_token_usage(
    raw: Any,
    *,
    main_key: str = MAIN_SESSION_KEY,
    default_max_tokens: int = 200_000,
) -> TokenUsage | None:
    entries = raw if isinstance(raw, list) else _raw_sessions(raw)
    main = next(
        (s for s in entries if isinstance(s, dict) and (s.get("key") or s.get("sessionKey") or "") == main_key),
        None,
    )
    if main is None:
        return None

    used = max(0, int(_first_present(main, "totalTokens", default=0)))
    limit = max(0, int(_first_present(main, "contextTokens", "maxTokens", default=default_max_tokens)))
    percentage = round(used / limit * 100) if limit > 0 else 0
    return TokenUsage(
        context_tokens=used,
        max_tokens=limit,
        percentage=percentage,
        compactions=max(0, int(main.get("compactions") or 0)),
    )


def normalize_history(raw_messages: Any) -> list[Message]:
    """Keep the user/assistant turns of a gateway history, dropping tool traffic and noise."""
    if not isinstance(raw_messages, list):
        return []

    messages: list[Message] = []
    for raw in raw_messages:
        if not isinstance(raw, dict):
            continue
        role = raw.get("role")
        if role not in ("user", "assistant"):
            continue
        content = raw.get("content")
        text = extract_text(content)
        if not text:
            continue
        if isinstance(content, list) and content and all(
            isinstance(b, dict) and b.get("type") in _TOOL_BLOCK_TYPES for b in content
        ):
            continue
        if raw.get("toolCallId") or raw.get("tool_call_id"):
            continue
        if is_noise(text):
            continue

        messages.append(
            Message(
                id=str(raw.get("id") or raw.get("messageId") or f"hist-{uuid4().hex[:12]}"),
                role=role,
                content=text,
                timestamp=str(raw.get("timestamp") or raw.get("createdAt") or utc_now()),
                media_url=raw.get("mediaUrl") or None,
            )
        )
    return messages
