"""TimerWorker: dispara timers de dashboard no seu segundo do dia (UTC).

Executado uma vez por segundo pelo agendador. Para cada timer habilitado
cujo ``start_time`` coincide com o segundo atual, envia o comando de escrita
ao hardware conectado e, se pedido, notifica o app por push.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.sessions import make_write_body

if TYPE_CHECKING:
    from concurrent.futures import Future

    from app.domain.user import Dashboard, Timer, User
    from app.infra.notifications import GCMWrapper
    from app.sessions import SessionDao
    from app.users import UserDao

logger = logging.getLogger(__name__)

TIMER_NOTIFICATION_TITLE = "Timer"


def second_of_day(now: datetime) -> int:
    """Segundo do dia em UTC (0..86399)."""
    utc = now.astimezone(UTC)
    return utc.hour * 3600 + utc.minute * 60 + utc.second


class TimerWorker:
    """Avalia os timers de todos os usuários a cada tick."""

    def __init__(self, user_dao: UserDao, session_dao: SessionDao, gcm_wrapper: GCMWrapper) -> None:
        self._user_dao = user_dao
        self._session_dao = session_dao
        self._gcm = gcm_wrapper

    def run(self, now: datetime | None = None) -> int:
        """Executa um tick.

        Returns:
            Quantidade de timers disparados.
        """
        current = second_of_day(now or datetime.now(UTC))
        fired = 0
        for user in self._user_dao.snapshot():
            for dash in user.profile.dashboards:
                for timer in dash.timers:
                    if timer.is_enabled and timer.start_time == current:
                        self._fire(user, dash, timer)
                        fired += 1
        if fired:
            logger.debug("timers_fired", extra={"count": fired})
        return fired

    def _fire(self, user: User, dash: Dashboard, timer: Timer) -> None:
        session = self._session_dao.get(user.key)
        if session is not None:
            body = make_write_body(timer.pin_type, timer.pin, timer.start_value)
            session.send_to_hardware(dash.id, timer.device_id, body)
        if not timer.notify or not self._gcm.is_configured:
            return
        message = f"{dash.name or dash.id}: pin {timer.pin} = {timer.start_value}"
        for token in user.push_tokens:
            try:
                future = self._gcm.send(token, TIMER_NOTIFICATION_TITLE, message)
            except (ValueError, RuntimeError) as exc:
                logger.warning("timer_push_failed", extra={"error_type": type(exc).__name__})
                continue
            future.add_done_callback(_log_push_result)


def _log_push_result(future: Future[object]) -> None:
    if future.cancelled():
        logger.warning("timer_push_failed", extra={"error_type": "CancelledError"})
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("timer_push_failed", extra={"error_type": type(exc).__name__})
