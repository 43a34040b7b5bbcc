from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

CONFIG_ENV_VAR = "AEGIS_CHAT_CONFIG"


@dataclass
class AppConfig:
    main_session_key: str
    main_session_label: str
    tab_label_max_chars: int
    preview_chars: int
    default_max_tokens: int
    discard_partial_on_close: bool
    log_level: str
    log_consumers: list | None


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override)
    return Path.cwd() / "config.json"


def load_json_config(path: Path | None = None) -> dict:
    """Read config.json; only the implicit working-directory file may be absent."""
    explicit = path is not None or bool(os.environ.get(CONFIG_ENV_VAR, "").strip())
    path = path or config_path()
    if path.exists():
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    if explicit:
        raise FileNotFoundError(f"Config file not found: {path}")
    return {}


def _to_bool(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return bool(value)


def _positive_int(config: dict, key: str, default: int, minimum: int = 1) -> int:
    value = int(config.get(key, default))
    if value < minimum:
        raise ValueError(f"{key} must be at least {minimum}, got {value}")
    return value


def parse_app_config(config: dict) -> AppConfig:
    main_key = str(config.get("MainSessionKey", "agent:main:main")).strip()
    if not main_key:
        raise ValueError("MainSessionKey must not be empty")

    return AppConfig(
        main_session_key=main_key,
        main_session_label=str(config.get("MainSessionLabel", "Main session")),
        tab_label_max_chars=_positive_int(config, "TabLabelMaxChars", 24, minimum=3),
        preview_chars=_positive_int(config, "PreviewChars", 60),
        default_max_tokens=_positive_int(config, "DefaultMaxTokens", 200_000),
        discard_partial_on_close=_to_bool(config.get("DiscardPartialOnClose", False), default=False),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )
