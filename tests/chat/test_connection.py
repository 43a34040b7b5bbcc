import unittest

from aegis_chat.chat.connection import ConnectionMonitor
from aegis_chat.chat.models import ConnectionStatus, TokenUsage


class ConnectionMonitorTests(unittest.TestCase):
    def test_starts_disconnected(self) -> None:
        self.assertEqual(ConnectionStatus(False, False, None), ConnectionMonitor().status)

    def test_status_is_replaced_wholesale(self) -> None:
        monitor = ConnectionMonitor()
        monitor.set_status(False, True)
        monitor.set_status(False, False, "refused")
        self.assertEqual(ConnectionStatus(False, False, "refused"), monitor.status)
        monitor.set_status(True, False)
        self.assertEqual(ConnectionStatus(True, False, None), monitor.status)

    def test_empty_error_becomes_none(self) -> None:
        self.assertIsNone(ConnectionMonitor().set_status(False, False, "").error)

    def test_connected_and_connecting_never_both_true(self) -> None:
        status = ConnectionMonitor().set_status(True, True)
        self.assertTrue(status.connected)
        self.assertFalse(status.connecting)


class TokenUsageTests(unittest.TestCase):
    def test_rejects_negative_values(self) -> None:
        with self.assertRaises(ValueError):
            TokenUsage(context_tokens=-1, max_tokens=10, percentage=0, compactions=0)

    def test_accepts_zero(self) -> None:
        self.assertEqual(0, TokenUsage(0, 0, 0, 0).percentage)


if __name__ == "__main__":
    unittest.main()
