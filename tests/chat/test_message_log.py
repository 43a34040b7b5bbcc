import unittest

from aegis_chat.chat.message_log import MessageLog
from aegis_chat.chat.models import Message


def _msg(message_id: str, content: str = "hi", role: str = "user") -> Message:
    return Message(id=message_id, role=role, content=content, timestamp="2026-02-19T00:00:00+00:00")


class MessageLogTests(unittest.TestCase):
    def setUp(self) -> None:
        self.log = MessageLog("main")

    def test_append_ignores_duplicate_ids(self) -> None:
        self.assertTrue(self.log.append(_msg("m1")))
        self.assertFalse(self.log.append(_msg("m1", content="again")))
        self.assertEqual(1, len(self.log.messages))
        self.assertEqual("hi", self.log.messages[0].content)

    def test_same_id_may_exist_in_different_sessions(self) -> None:
        self.log.append(_msg("m1"))
        self.log.append(_msg("m1"), session_key="other")
        self.assertEqual(1, len(self.log.messages_for("main")))
        self.assertEqual(1, len(self.log.messages_for("other")))

    def test_repeated_chunk_yields_single_message(self) -> None:
        for _ in range(5):
            self.log.upsert_streaming("a1", "X")
        self.assertEqual(1, len(self.log.messages))
        message = self.log.messages[0]
        self.assertEqual("X", message.content)
        self.assertEqual("assistant", message.role)
        self.assertTrue(message.is_streaming)

    def test_cumulative_chunks_then_finalize_keeps_last_content(self) -> None:
        for content in ("Hel", "Hello", "Hello world"):
            self.log.upsert_streaming("m1", content)
        self.assertEqual("Hello world", self.log.messages[0].content)

        final = self.log.finalize("m1")
        self.assertIsNotNone(final)
        self.assertEqual("Hello world", final.content)
        self.assertFalse(final.is_streaming)

    def test_finalize_with_content_replaces_it(self) -> None:
        self.log.upsert_streaming("m1", "partial")
        self.log.finalize("m1", "complete answer")
        self.assertEqual("complete answer", self.log.messages[0].content)

    def test_finalize_with_empty_content_keeps_streamed_text(self) -> None:
        self.log.upsert_streaming("m1", "streamed")
        self.log.finalize("m1", "")
        self.assertEqual("streamed", self.log.messages[0].content)

    def test_finalize_unknown_id_is_noop(self) -> None:
        self.assertIsNone(self.log.finalize("missing", "text"))
        self.assertEqual((), self.log.messages)

    def test_chunk_after_finalize_is_ignored(self) -> None:
        self.log.upsert_streaming("m1", "draft")
        self.log.finalize("m1", "final")
        self.assertIsNone(self.log.upsert_streaming("m1", "more"))
        message = self.log.messages[0]
        self.assertFalse(message.is_streaming)
        self.assertEqual("final", message.content)

    def test_late_finalize_may_overwrite_final_content(self) -> None:
        self.log.upsert_streaming("m1", "a")
        self.log.finalize("m1", "first")
        self.log.finalize("m1", "second")
        self.assertEqual("second", self.log.messages[0].content)

    def test_media_is_merged_only_when_url_given(self) -> None:
        self.log.upsert_streaming("m1", "pic", media_url="https://x/img.png", media_type="image")
        self.log.upsert_streaming("m1", "pic!")
        message = self.log.messages[0]
        self.assertEqual("https://x/img.png", message.media_url)
        self.assertEqual("image", message.media_type)
        self.assertEqual("pic!", message.content)

    def test_readers_keep_their_snapshot(self) -> None:
        self.log.append(_msg("m1"))
        before = self.log.messages
        self.log.append(_msg("m2"))
        self.log.upsert_streaming("m1", "changed?")
        self.assertEqual(1, len(before))
        self.assertEqual("hi", before[0].content)

    def test_activate_switches_visible_log(self) -> None:
        self.log.append(_msg("m1"))
        self.assertEqual((), self.log.activate("s2"))
        self.log.append(_msg("m2"))
        self.assertEqual(["m1"], [m.id for m in self.log.messages_for("main")])
        self.assertEqual(["m2"], [m.id for m in self.log.activate("s2")])

    def test_finalize_reaches_background_session_holding_the_id(self) -> None:
        self.log.activate("s1")
        self.log.upsert_streaming("m1", "thinking")
        self.log.activate("s2")

        final = self.log.finalize("m1", "done")
        self.assertIsNotNone(final)
        self.assertEqual("done", self.log.messages_for("s1")[0].content)
        self.assertEqual((), self.log.messages_for("s2"))

    def test_explicit_session_key_wins(self) -> None:
        self.log.upsert_streaming("m1", "bg", session_key="worker")
        self.assertEqual((), self.log.messages)
        self.assertEqual("bg", self.log.messages_for("worker")[0].content)

    def test_replace_all_and_clear(self) -> None:
        self.log.replace_all([_msg("h1"), _msg("h2"), _msg("h1")])
        self.assertEqual(["h1", "h2"], [m.id for m in self.log.messages])
        self.log.clear()
        self.assertEqual((), self.log.messages)

    def test_discard_streaming_drops_partial_turns_only(self) -> None:
        self.log.append(_msg("u1"))
        self.log.upsert_streaming("a1", "partial")
        self.assertEqual(1, self.log.discard_streaming("main"))
        self.assertEqual(["u1"], [m.id for m in self.log.messages])
        self.assertEqual(0, self.log.discard_streaming("unknown"))

    def test_forget_removes_cache(self) -> None:
        self.log.append(_msg("m1"), session_key="old")
        self.log.forget("old")
        self.assertNotIn("old", self.log.session_keys())
        self.assertEqual((), self.log.messages_for("old"))


if __name__ == "__main__":
    unittest.main()
