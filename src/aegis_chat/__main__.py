"""Replay a JSON-lines file of gateway events into a chat store and print the result.

Each line is one event object (see ``aegis_chat.chat.events.parse_event``), a
user action (``{"type": "open_tab", "key": ...}``) or a raw gateway listing
(``gateway.sessions`` / ``gateway.history``).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from aegis_chat.app_config import load_json_config, parse_app_config
from aegis_chat.bootstrap import AppRuntime, bootstrap_runtime
from aegis_chat.chat.events import parse_event
from aegis_chat.services.session_controller import SessionController


def apply_line(runtime: AppRuntime, payload: dict) -> None:
    store = runtime.store
    kind = payload.get("type") if isinstance(payload, dict) else None

    if kind == "gateway.sessions":
        runtime.bridge.on_sessions_listing(payload.get("payload"))
    elif kind == "gateway.history":
        runtime.bridge.begin_history_load()
        runtime.bridge.on_history(payload.get("payload"), session_key=payload.get("sessionKey"))
    elif kind == "open_tab":
        store.open_tab(str(payload["key"]))
    elif kind == "close_tab":
        store.close_tab(str(payload["key"]))
    elif kind == "reorder_tabs":
        store.reorder_tabs([str(k) for k in payload["keys"]])
    elif kind == "draft":
        store.set_draft(str(payload["key"]), str(payload.get("text", "")))
    else:
        store.dispatch(parse_event(payload))


def replay(runtime: AppRuntime, path: Path) -> int:
    applied = 0
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                apply_line(runtime, json.loads(line))
            except (ValueError, KeyError, TypeError) as ex:
                logger.warning(f"{path}:{line_no}: skipped ({ex})")
                continue
            applied += 1
    return applied


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aegis-chat", description=__doc__.splitlines()[0])
    parser.add_argument("events", type=Path, help="JSON-lines file of events to replay")
    parser.add_argument("--config", type=Path, default=None, help="config.json to use instead of the default")
    parser.add_argument("--messages", action="store_true", help="print the active session's messages")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        app = parse_app_config(load_json_config(args.config))
    except (OSError, ValueError) as ex:
        logger.error(f"Invalid configuration: {ex}")
        return 1
    runtime = bootstrap_runtime(app)

    if not args.events.exists():
        logger.error(f"Event file not found: {args.events}")
        return 1

    applied = replay(runtime, args.events)
    controller = SessionController(line_prefix="  ")

    print(f"aegis-chat replay: {applied} event(s) applied from {args.events}")
    for line in controller.format_snapshot_lines(runtime.store.snapshot()):
        print(line)
    print("Tabs:")
    for line in controller.format_tab_lines(runtime.store):
        print(line)
    if args.messages:
        print("Messages:")
        for message in runtime.store.messages:
            print(controller.format_message_line(message))
    if runtime.log_descriptions:
        print(f"Logging: {', '.join(runtime.log_descriptions)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
