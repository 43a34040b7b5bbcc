import unittest

from aegis_chat.app_config import parse_app_config
from aegis_chat.chat import ChatStore, Message
from aegis_chat.services.gateway_bridge import GatewayBridge
from aegis_chat.services.session_controller import SessionController


class GatewayBridgeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.app = parse_app_config({"MainSessionLabel": "AEGIS"})
        self.store = ChatStore(main_key=self.app.main_session_key, main_label=self.app.main_session_label)
        self.bridge = GatewayBridge(self.store, self.app)

    def test_stream_callbacks_reconcile_one_message(self) -> None:
        self.bridge.on_stream_chunk("m1", "Hel")
        self.bridge.on_stream_chunk("m1", "Hello", {"mediaUrl": "https://x/a.mp4", "mediaType": "video"})
        self.bridge.on_stream_end("m1", "Hello!")
        message = self.store.messages[0]
        self.assertEqual("Hello!", message.content)
        self.assertEqual("video", message.media_type)
        self.assertFalse(message.is_streaming)
        self.assertFalse(self.store.is_typing)

    def test_sessions_listing_updates_catalog_and_usage(self) -> None:
        self.bridge.on_sessions_listing(
            {
                "sessions": [
                    {"key": "agent:main:sub-1"},
                    {"key": "agent:main:main", "totalTokens": 1000, "contextTokens": 4000},
                ]
            }
        )
        self.assertEqual(["agent:main:main", "agent:main:sub-1"], [s.key for s in self.store.sessions])
        self.assertEqual("AEGIS", self.store.sessions[0].label)
        self.assertEqual(25, self.store.token_usage.percentage)

    def test_empty_listing_keeps_catalog(self) -> None:
        self.bridge.on_sessions_listing({"sessions": [{"key": "agent:main:sub-1"}]})
        self.bridge.on_sessions_listing({"sessions": []})
        self.assertEqual(1, len(self.store.sessions))

    def test_history_load_round(self) -> None:
        self.bridge.begin_history_load()
        self.assertTrue(self.store.is_loading_history)
        count = self.bridge.on_history(
            {"messages": [{"id": "h1", "role": "user", "content": "hi"}, {"role": "system", "content": "x"}]},
            session_key="agent:main:sub-1",
        )
        self.assertEqual(1, count)
        self.assertFalse(self.store.is_loading_history)
        self.assertEqual(["h1"], [m.id for m in self.store.messages_for("agent:main:sub-1")])

    def test_message_and_status_callbacks(self) -> None:
        self.store.set_typing(True)
        self.bridge.on_message(Message(id="a1", role="assistant", content="done", timestamp="t"))
        self.bridge.on_status_change(False, False, "gateway unreachable")
        self.assertFalse(self.store.is_typing)
        self.assertEqual("gateway unreachable", self.store.connection.error)


class SessionControllerTests(unittest.TestCase):
    def test_formats_tabs_and_snapshot(self) -> None:
        store = ChatStore(main_label="AEGIS")
        store.set_draft("agent:main:main", "unsent   words")
        store.open_tab("agent:main:sub-9")
        store.update_streaming_message("m1", "working")
        controller = SessionController(line_prefix="> ")

        tabs = controller.format_tab_lines(store)
        self.assertEqual(2, len(tabs))
        self.assertIn("AEGIS", tabs[0])
        self.assertIn("draft='unsent words'", tabs[0])
        self.assertTrue(tabs[1].startswith("> * sub-9"))
        self.assertIn("streaming=1", tabs[1])

        lines = controller.format_snapshot_lines(store.snapshot())
        self.assertEqual("> Active session: agent:main:sub-9", lines[0])
        self.assertIn("disconnected", lines[1])
        self.assertIn("Typing: yes", lines[2])

    def test_preview_truncates(self) -> None:
        controller = SessionController(line_prefix="", preview_chars=10)
        self.assertEqual("abcdefg...", controller.preview("abcdefghijklmnop"))


if __name__ == "__main__":
    unittest.main()
