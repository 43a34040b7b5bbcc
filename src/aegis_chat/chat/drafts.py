from __future__ import annotations


class DraftCache:
    def __init__(self) -> None:
        self._drafts: dict[str, str] = {}

    @property
    def drafts(self) -> dict[str, str]:
        return dict(self._drafts)

    def set_draft(self, session_key: str, text: str) -> None:
        self._drafts[session_key] = text

    def get_draft(self, session_key: str) -> str:
        return self._drafts.get(session_key, "")

    def clear_draft(self, session_key: str) -> None:
        self._drafts.pop(session_key, None)
