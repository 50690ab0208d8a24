"""EventorProcessor: regras ``se pino <cond> limiar então notifique``.

Chamado a cada escrita de hardware. Cada regra disparada gera uma ação
(push, e-mail ou tweet); falhas de uma ação não interrompem o fluxo do
hardware nem as demais ações.
"""

from __future__ import annotations

import logging
from concurrent.futures import CancelledError
from functools import partial
from typing import TYPE_CHECKING, Any

from utils.errors import QueueFullError

if TYPE_CHECKING:
    from concurrent.futures import Future

    from app.domain.user import EventorRule, PinType, User
    from app.infra.blocking import BlockingIOProcessor
    from app.infra.notifications import GCMWrapper, MailWrapper, TwitterWrapper
    from app.observability import GlobalStats

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "IoT Hub"
MAIL_SUBJECT = "Alerta do dispositivo"


class EventorProcessor:
    """Avalia regras do dashboard e despacha notificações.

    Args:
        gcm_wrapper: Push.
        mail_wrapper: E-mail (enviado no pool bloqueante).
        twitter_wrapper: Tweets (enviados no pool bloqueante).
        blocking_io_processor: Pool para envios síncronos.
        stats: Contadores globais.
    """

    def __init__(
        self,
        gcm_wrapper: GCMWrapper,
        mail_wrapper: MailWrapper,
        twitter_wrapper: TwitterWrapper,
        blocking_io_processor: BlockingIOProcessor,
        stats: GlobalStats,
    ) -> None:
        self.gcm_wrapper = gcm_wrapper
        self.mail_wrapper = mail_wrapper
        self.twitter_wrapper = twitter_wrapper
        self._blocking = blocking_io_processor
        self._stats = stats

    def process(
        self,
        user: User,
        dash_id: int,
        device_id: int,
        pin_type: PinType,
        pin: int,
        value: str,
    ) -> int:
        """Avalia as regras para o valor recebido.

        Returns:
            Número de ações agendadas. O contador ``eventor_<ação>`` só
            é marcado quando o envio termina sem erro.
        """
        dash = user.profile.get_dashboard(dash_id)
        if dash is None or not dash.rules:
            return 0
        try:
            numeric = float(value)
        except ValueError:
            return 0
        fired = 0
        for rule in dash.rules:
            if rule.device_id != device_id or rule.pin != pin or not rule.matches(numeric):
                continue
            self._stats.mark("eventor")
            if self._dispatch(user, rule, pin_type):
                fired += 1
        return fired

    def _dispatch(self, user: User, rule: EventorRule, pin_type: PinType) -> bool:
        message = rule.message or f"{pin_type} pin {rule.pin} {rule.condition} {rule.threshold}"
        futures: list[Future[Any]] = []
        try:
            if rule.action == "notify":
                if not user.push_tokens:
                    return False
                for token in user.push_tokens:
                    futures.append(self.gcm_wrapper.send(token, NOTIFICATION_TITLE, message))
            elif rule.action == "mail":
                futures.append(self._blocking.execute(self.mail_wrapper.send, user.email, MAIL_SUBJECT, message))
            elif rule.action == "twitter":
                if not user.twitter_token:
                    return False
                futures.append(self._blocking.execute(self.twitter_wrapper.send, user.twitter_token, message))
        except (ValueError, QueueFullError, RuntimeError) as exc:
            _log_action_failure(rule.action, exc)
            return False
        finally:
            for future in futures:
                future.add_done_callback(partial(self._on_sent, rule.action))
        return True

    def _on_sent(self, action: str, future: Future[Any]) -> None:
        if future.cancelled():
            _log_action_failure(action, CancelledError())
            return
        exc = future.exception()
        if exc is not None:
            _log_action_failure(action, exc)
            return
        self._stats.mark(f"eventor_{action}")


def _log_action_failure(action: str, exc: BaseException) -> None:
    logger.warning(
        "eventor_action_failed",
        extra={"action": action, "error_type": type(exc).__name__},
    )
