from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from aegis_chat.chat.models import MAIN_SESSION_KEY, Session
from aegis_chat.chat.registry import SessionRegistry


def tab_label(
    session: Session | None,
    key: str,
    *,
    main_key: str = MAIN_SESSION_KEY,
    main_label: str = "Main session",
    max_chars: int = 24,
) -> str:
    if key == main_key:
        return main_label
    label = session.label if session is not None and session.label else key.split(":")[-1]
    if len(label) <= max_chars:
        return label
    if max_chars < 3:
        return label[: max(0, max_chars)]
    return label[: max_chars - 2] + "…"


class TabManager:
    """Open tab sequence in front of a SessionRegistry.

    The sequence is never empty, always holds the main session and always holds
    the active session key.
    """

    def __init__(self, registry: SessionRegistry, *, main_key: str = MAIN_SESSION_KEY):
        self._registry = registry
        self._main_key = main_key
        self._tabs: list[str] = [main_key]
        self._registry.set_active(main_key)

    @property
    def main_key(self) -> str:
        return self._main_key

    @property
    def open_tabs(self) -> tuple[str, ...]:
        return tuple(self._tabs)

    @property
    def active_key(self) -> str:
        return self._registry.active_key

    def is_open(self, key: str) -> bool:
        return key in self._tabs

    def open(self, key: str) -> None:
        if key not in self._tabs:
            self._tabs = [*self._tabs, key]
            logger.debug(f"Opened tab {key!r}")
        self._registry.set_active(key)

    def close(self, key: str) -> bool:
        if key == self._main_key:
            logger.debug("Refusing to close the main session tab")
            return False
        if key not in self._tabs:
            return False

        was_active = key == self._registry.active_key
        self._tabs = [k for k in self._tabs if k != key]
        self._ensure_main()
        if was_active:
            self._registry.set_active(self._tabs[-1])
        logger.debug(f"Closed tab {key!r}")
        return True

    def reorder(self, new_order: Sequence[str]) -> bool:
        proposed = list(new_order)
        if len(proposed) != len(self._tabs) or set(proposed) != set(self._tabs):
            logger.warning(f"Rejected tab reorder {proposed!r}: not a permutation of {self._tabs!r}")
            return False
        self._tabs = proposed
        return True

    def cycle(self, *, backwards: bool = False) -> str:
        active = self._registry.active_key
        index = self._tabs.index(active) if active in self._tabs else -1
        step = -1 if backwards else 1
        key = self._tabs[(index + step) % len(self._tabs)]
        self.open(key)
        return key

    def _ensure_main(self) -> None:
        if self._main_key not in self._tabs:
            self._tabs.insert(0, self._main_key)
