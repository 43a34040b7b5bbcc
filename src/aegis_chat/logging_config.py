"""Log sinks for aegis-chat.

Chat state changes are logged from the store and its components (tab
open/close, rejected reorders, ignored transport events, normalized
connection states). Each consumer listed under ``LogConsumers`` in
config.json becomes one loguru sink that only sees records from the
aegis_chat package, so a host application embedding the store keeps its
own sinks quiet.
"""

import sys
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loguru import logger

_PACKAGE = "aegis_chat"

# console lines stay short; the replay CLI prints its snapshot on stdout
_CONSOLE_FORMAT = "<dim>aegis-chat</dim> <level>{level:<7}</level> <cyan>{name}</cyan> - <level>{message}</level>"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | aegis-chat | {level:<7} | {name}:{function}:{line} - {message}"
_DEFAULT_LOG_FILE = "aegis_chat.log"


def _package_only(record: dict) -> bool:
    return (record["name"] or "").startswith(_PACKAGE)


@runtime_checkable
class LogConsumer(Protocol):
    def register(self, level: str) -> int: ...
    def describe(self, level: str) -> str: ...


class ConsoleLogConsumer:
    def __init__(self, colorize: bool | None = None):
        self._colorize = colorize

    def register(self, level: str) -> int:
        return logger.add(
            sys.stderr,
            level=level,
            colorize=self._colorize,
            filter=_package_only,
            format=_CONSOLE_FORMAT,
        )

    def describe(self, level: str) -> str:
        return f"console (stderr, {level})"


class FileLogConsumer:
    def __init__(
        self,
        path: str = _DEFAULT_LOG_FILE,
        rotation: str = "5 MB",
        retention: int = 3,
        serialize: bool = False,
    ):
        self._path = path
        self._rotation = rotation
        self._retention = retention
        self._serialize = serialize

    def register(self, level: str) -> int:
        Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        return logger.add(
            self._path,
            level=level,
            filter=_package_only,
            format=_FILE_FORMAT,
            rotation=self._rotation,
            retention=self._retention,
            serialize=self._serialize,
        )

    def describe(self, level: str) -> str:
        kind = "jsonl" if self._serialize else "text"
        return f"file ({self._path}, {kind}, {level})"


_CONSUMER_TYPES: dict[str, type] = {
    "console": ConsoleLogConsumer,
    "file": FileLogConsumer,
}

_DEFAULT_CONSUMERS = [
    {"type": "console", "level": "WARNING"},
    {"type": "file", "path": _DEFAULT_LOG_FILE},
]


def setup_logging(
    level: str = "INFO",
    consumers: list[dict[str, Any]] | None = None,
) -> list[str]:
    """Swap loguru's sinks for the configured consumers.

    Returns one description per registered consumer, which the replay CLI
    prints as its "Logging:" line. ``None`` means the defaults (warnings on
    stderr plus a rotating aegis_chat.log); an empty list silences the package.
    """
    logger.remove()

    if consumers is None:
        consumers = _DEFAULT_CONSUMERS

    descriptions: list[str] = []

    for config in consumers:
        sink_type = config.get("type", "")
        cls = _CONSUMER_TYPES.get(sink_type)
        if cls is None:
            logger.warning(f"Unknown log consumer type: {sink_type!r}")
            continue

        kwargs = {k: v for k, v in config.items() if k not in ("type", "level")}
        sink_level = config.get("level", level)

        consumer = cls(**kwargs)
        consumer.register(sink_level)
        descriptions.append(consumer.describe(sink_level))

    return descriptions
