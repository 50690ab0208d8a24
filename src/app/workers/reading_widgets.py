"""ReadingWidgetsWorker: leituras periódicas pedidas por widgets.

Widgets com ``frequency_ms > 0`` pedem ao hardware o valor do pino nessa
frequência, mas só enquanto o app está aberto e o hardware conectado.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

from app.sessions import make_read_body

if TYPE_CHECKING:
    from app.domain.user import UserKey
    from app.sessions import SessionDao
    from app.users import UserDao

logger = logging.getLogger(__name__)

WidgetKey = tuple["UserKey", int, int]


class ReadingWidgetsWorker:
    """Envia comandos de leitura para widgets vencidos."""

    def __init__(self, session_dao: SessionDao, user_dao: UserDao) -> None:
        self._session_dao = session_dao
        self._user_dao = user_dao
        self._lock = threading.Lock()
        self._last_request_ms: dict[WidgetKey, int] = {}

    def run(self, now_ms: int | None = None) -> int:
        """Executa um tick; retorna quantos comandos de leitura foram enviados."""
        now = now_ms if now_ms is not None else int(time.time() * 1000)
        sent = 0
        with self._lock:
            for key, session in self._session_dao.snapshot():
                if not session.is_app_connected:
                    continue
                user = self._user_dao.get(key)
                if user is None:
                    continue
                for dash in user.profile.dashboards:
                    if not dash.is_active:
                        continue
                    for widget in dash.widgets:
                        if widget.frequency_ms <= 0:
                            continue
                        if not session.is_hardware_connected(dash.id, widget.device_id):
                            continue
                        widget_key = (key, dash.id, widget.id)
                        last = self._last_request_ms.get(widget_key)
                        if last is not None and now - last < widget.frequency_ms:
                            continue
                        body = make_read_body(widget.pin_type, widget.pin)
                        if session.send_to_hardware(dash.id, widget.device_id, body):
                            sent += 1
                        self._last_request_ms[widget_key] = now
        return sent

    def forget(self, key: UserKey) -> None:
        """Descarta o histórico de leituras do usuário (ex.: logout)."""
        with self._lock:
            for widget_key in [k for k in self._last_request_ms if k[0] == key]:
                del self._last_request_ms[widget_key]
