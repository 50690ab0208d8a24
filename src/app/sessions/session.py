"""Session: canais abertos (app e hardware) de um usuário.

Canais são objetos de transporte com ``send(body)``. Um usuário pode ter
vários apps conectados e vários hardwares, cada hardware preso a um
(dashboard, dispositivo).
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.domain.user import PinType, UserKey

logger = logging.getLogger(__name__)

_PIN_PREFIX = {"digital": "d", "analog": "a", "virtual": "v"}


class Channel(Protocol):
    def send(self, body: str) -> None: ...


def make_write_body(pin_type: PinType, pin: int, value: str) -> str:
    """Comando de escrita no pino (ex.: ``vw 5 10``)."""
    return f"{_PIN_PREFIX[pin_type]}w {pin} {value}"


def make_read_body(pin_type: PinType, pin: int) -> str:
    """Comando de leitura do pino (ex.: ``vr 5``)."""
    return f"{_PIN_PREFIX[pin_type]}r {pin}"


class Session:
    """Grupo de canais de um usuário (thread-safe)."""

    def __init__(self, key: UserKey) -> None:
        self.key = key
        self._lock = threading.Lock()
        self._app_channels: list[Channel] = []
        self._hardware_channels: dict[int, tuple[Channel, int, int]] = {}

    def add_app_channel(self, channel: Channel) -> None:
        with self._lock:
            self._app_channels.append(channel)

    def add_hardware_channel(self, channel: Channel, dash_id: int, device_id: int) -> None:
        with self._lock:
            self._hardware_channels[id(channel)] = (channel, dash_id, device_id)

    def remove_channel(self, channel: Channel) -> bool:
        with self._lock:
            if self._hardware_channels.pop(id(channel), None) is not None:
                return True
            if channel in self._app_channels:
                self._app_channels.remove(channel)
                return True
            return False

    @property
    def is_app_connected(self) -> bool:
        with self._lock:
            return bool(self._app_channels)

    def is_hardware_connected(self, dash_id: int, device_id: int | None = None) -> bool:
        with self._lock:
            return any(
                dash == dash_id and (device_id is None or device == device_id)
                for _, dash, device in self._hardware_channels.values()
            )

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._app_channels and not self._hardware_channels

    def send_to_hardware(self, dash_id: int, device_id: int, body: str) -> int:
        """Envia para os hardwares do (dashboard, dispositivo); retorna quantos."""
        with self._lock:
            targets = [
                channel
                for channel, dash, device in self._hardware_channels.values()
                if dash == dash_id and device == device_id
            ]
        return self._send_all(targets, body)

    def send_to_apps(self, body: str) -> int:
        with self._lock:
            targets = list(self._app_channels)
        return self._send_all(targets, body)

    @staticmethod
    def _send_all(targets: list[Channel], body: str) -> int:
        sent = 0
        for channel in targets:
            try:
                channel.send(body)
            except OSError as exc:
                logger.warning("channel_send_failed", extra={"error_type": type(exc).__name__})
                continue
            sent += 1
        return sent
