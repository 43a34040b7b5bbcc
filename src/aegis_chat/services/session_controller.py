from __future__ import annotations

from aegis_chat.chat.models import Message
from aegis_chat.chat.store import ChatSnapshot, ChatStore


class SessionController:
    def __init__(self, *, line_prefix: str, preview_chars: int = 80):
        self._line_prefix = line_prefix
        self._preview_chars = preview_chars

    def preview(self, text: str) -> str:
        text = " ".join(text.split())
        if len(text) <= self._preview_chars:
            return text
        return text[: self._preview_chars - 3] + "..."

    def format_tab_lines(self, store: ChatStore) -> list[str]:
        lines: list[str] = []
        for key, label in store.tab_labels():
            marker = "*" if key == store.active_key else " "
            streaming = len([m for m in store.messages_for(key) if m.is_streaming])
            draft = store.get_draft(key)
            line = f"{self._line_prefix}{marker} {label} (key={key}, messages={len(store.messages_for(key))}"
            if streaming:
                line += f", streaming={streaming}"
            if draft:
                line += f", draft={self.preview(draft)!r}"
            lines.append(line + ")")
        return lines

    def format_message_line(self, message: Message) -> str:
        suffix = " …" if message.is_streaming else ""
        media = f" [{message.media_type or 'media'}: {message.media_url}]" if message.media_url else ""
        return f"{self._line_prefix}{message.role}> {self.preview(message.content)}{suffix}{media}"

    def format_snapshot_lines(self, snapshot: ChatSnapshot) -> list[str]:
        connection = snapshot.connection
        if connection.connected:
            link = "connected"
        elif connection.connecting:
            link = "connecting"
        else:
            link = "disconnected"
        if connection.error:
            link += f" ({connection.error})"

        lines = [f"{self._line_prefix}Active session: {snapshot.active_key}"]
        lines.append(f"{self._line_prefix}- Connection: {link}")
        lines.append(
            f"{self._line_prefix}- Messages: {len(snapshot.messages)} | "
            f"Typing: {'yes' if snapshot.is_typing else 'no'} | Known sessions: {len(snapshot.sessions)}"
        )
        if snapshot.token_usage is not None:
            usage = snapshot.token_usage
            lines.append(
                f"{self._line_prefix}- Context: {usage.context_tokens:,}/{usage.max_tokens:,} tokens "
                f"({usage.percentage}%, compactions={usage.compactions})"
            )
        return lines
