from __future__ import annotations

from loguru import logger

from aegis_chat.chat.models import ConnectionStatus


class ConnectionMonitor:
    """Mirrors the link state reported by the transport. Retries live there."""

    def __init__(self) -> None:
        self._status = ConnectionStatus()

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    def set_status(self, connected: bool, connecting: bool, error: str | None = None) -> ConnectionStatus:
        if connected and connecting:
            logger.warning("Transport reported connected and connecting at once; treating as connected")
            connecting = False

        status = ConnectionStatus(connected=bool(connected), connecting=bool(connecting), error=error or None)
        if status != self._status:
            if status.error:
                logger.warning(f"Gateway connection error: {status.error}")
            elif status.connected and not self._status.connected:
                logger.info("Gateway connected")
            elif status.connecting:
                logger.info("Gateway connecting")
            elif not status.connected and self._status.connected:
                logger.info("Gateway disconnected")
        self._status = status
        return status
