"""Holder: conjunto imutável dos subsistemas de longa duração do servidor.

O Holder é montado uma única vez por ``build_holder`` (ver builder.py) e
liberado uma única vez por ``shutdown_holder``. Depois de construído,
nenhum campo pode ser reatribuído.

Ordem de liberação (fixa):
    reporting_dao -> blocking_io_processor -> db_manager
    -> transport_holder -> redis_client
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from app.observability import reset_correlation_id, set_correlation_id
from config.logging import log_lifecycle_step
from utils.errors import ShutdownError

if TYPE_CHECKING:
    from app.infra.blocking import BlockingIOProcessor
    from app.infra.cache import RedisClient
    from app.infra.db import DBManager
    from app.infra.files import FileManager
    from app.infra.http import AsyncHttpClient
    from app.infra.notifications import GCMWrapper, MailWrapper, SMSWrapper, TwitterWrapper
    from app.infra.reporting import ReportingDao
    from app.infra.tls import SslContextHolder
    from app.infra.transport import TransportHolder
    from app.observability import GlobalStats
    from app.services import EventorProcessor, Limits, TokenManager
    from app.sessions import SessionDao
    from app.users import UserDao
    from app.workers import ReadingWidgetsWorker, TimerWorker
    from config.settings import ServerProperties

logger = logging.getLogger(__name__)

ReleaseStep = tuple[str, Callable[[], None]]


class RestoreMode(enum.Enum):
    """Origem do estado inicial de usuários."""

    FROM_DATABASE = "database"
    FROM_FILE = "file"


class _ShutdownState:
    """Marca única de shutdown, segura entre threads."""

    __slots__ = ("_done", "_lock")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False

    def begin(self) -> bool:
        """True apenas na primeira chamada."""
        with self._lock:
            if self._done:
                return False
            self._done = True
            return True

    @property
    def done(self) -> bool:
        return self._done


@dataclass(frozen=True, slots=True)
class Holder:
    """Subsistemas do servidor, prontos para uso.

    Campos que possuem recursos (threads, sockets, arquivos) são liberados
    por ``close()``; os demais são estado em memória.
    """

    props: ServerProperties
    region: str
    host: str
    redis_client: RedisClient
    file_manager: FileManager
    session_dao: SessionDao
    blocking_io_processor: BlockingIOProcessor
    db_manager: DBManager
    user_dao: UserDao
    token_manager: TokenManager
    stats: GlobalStats
    reporting_dao: ReportingDao
    transport_holder: TransportHolder
    http_client: AsyncHttpClient
    twitter_wrapper: TwitterWrapper
    mail_wrapper: MailWrapper
    gcm_wrapper: GCMWrapper
    sms_wrapper: SMSWrapper
    eventor_processor: EventorProcessor
    timer_worker: TimerWorker
    reading_widgets_worker: ReadingWidgetsWorker
    limits: Limits
    csv_download_url: str
    ssl_context_holder: SslContextHolder
    _shutdown: _ShutdownState = field(default_factory=_ShutdownState, repr=False, compare=False)

    @property
    def is_closed(self) -> bool:
        return self._shutdown.done

    def close(self) -> None:
        """Libera os recursos; ver ``shutdown_holder``."""
        shutdown_holder(self)


def release_steps(holder: Holder) -> list[ReleaseStep]:
    """Etapas de liberação do Holder, na ordem em que devem rodar."""
    return [
        ("reporting_dao", holder.reporting_dao.close),
        ("blocking_io_processor", holder.blocking_io_processor.close),
        ("db_manager", holder.db_manager.close),
        ("transport_holder", holder.transport_holder.close),
        ("redis_client", holder.redis_client.close),
    ]


def release_all(steps: Iterable[ReleaseStep], action: str = "release") -> list[tuple[str, BaseException]]:
    """Executa todas as etapas; falha de uma não impede as seguintes.

    Returns:
        Pares (nome, exceção) das etapas que falharam, em ordem.
    """
    failures: list[tuple[str, BaseException]] = []
    for name, release in steps:
        started = time.perf_counter()
        try:
            release()
        except Exception as exc:
            failures.append((name, exc))
            log_lifecycle_step(logger, name, action, error=exc)
            continue
        log_lifecycle_step(logger, name, action, elapsed_ms=(time.perf_counter() - started) * 1000)
    return failures


def shutdown_holder(holder: Holder) -> None:
    """Libera os cinco donos de recursos do Holder, nesta ordem.

    Segunda chamada é no-op (registrada em log).

    Raises:
        ShutdownError: Se alguma etapa falhou; todas as etapas já rodaram.
    """
    if not holder._shutdown.begin():
        logger.info("holder_shutdown_skipped", extra={"reason": "already_closed"})
        return

    token = set_correlation_id()
    started = time.perf_counter()
    try:
        logger.info("holder_shutdown_started", extra={"region": holder.region})
        failures = release_all(release_steps(holder))
        logger.info(
            "holder_shutdown_completed",
            extra={
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                "failures_count": len(failures),
            },
        )
    finally:
        reset_correlation_id(token)
    if failures:
        raise ShutdownError(failures)
