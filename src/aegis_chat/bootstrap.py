from __future__ import annotations

from dataclasses import dataclass

from aegis_chat.app_config import AppConfig
from aegis_chat.chat import ChatStore
from aegis_chat.logging_config import setup_logging
from aegis_chat.services.gateway_bridge import GatewayBridge


@dataclass
class AppRuntime:
    store: ChatStore
    bridge: GatewayBridge
    log_descriptions: list[str]


def build_store(app: AppConfig) -> ChatStore:
    return ChatStore(
        main_key=app.main_session_key,
        main_label=app.main_session_label,
        tab_label_max_chars=app.tab_label_max_chars,
        discard_partial_on_close=app.discard_partial_on_close,
    )


def bootstrap_runtime(app: AppConfig, *, configure_logging: bool = True) -> AppRuntime:
    log_descriptions: list[str] = []
    if configure_logging:
        log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers)

    store = build_store(app)
    return AppRuntime(
        store=store,
        bridge=GatewayBridge(store, app),
        log_descriptions=log_descriptions,
    )
