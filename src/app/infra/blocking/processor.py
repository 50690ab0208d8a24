"""BlockingIOProcessor: pool limitado para tirar I/O bloqueante do loop.

Usado para Redis, Firestore, SMTP e escrita de arquivos. A fila tem
capacidade fixa: tarefas acima do limite são rejeitadas com
``QueueFullError`` em vez de acumular memória sem limite.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, TypeVar

from utils.errors import QueueFullError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_POOL_SIZE = 6
DEFAULT_QUEUE_LIMIT = 5000


class BlockingIOProcessor:
    """Pool de threads com fila limitada.

    Args:
        pool_size: Número de threads do pool.
        queue_limit: Máximo de tarefas pendentes + em execução.
    """

    def __init__(self, pool_size: int = DEFAULT_POOL_SIZE, queue_limit: int = DEFAULT_QUEUE_LIMIT) -> None:
        if pool_size < 1:
            raise ValueError("pool_size deve ser >= 1")
        if queue_limit < 1:
            raise ValueError("queue_limit deve ser >= 1")
        self.pool_size = pool_size
        self.queue_limit = queue_limit
        self._slots = threading.BoundedSemaphore(queue_limit)
        self._executor = ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="blocking-io")
        self._closed = False
        logger.info(
            "blocking_io_processor_created",
            extra={"pool_size": pool_size, "queue_limit": queue_limit},
        )

    @property
    def is_closed(self) -> bool:
        return self._closed

    def execute(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future[T]:
        """Agenda ``fn`` no pool.

        Raises:
            QueueFullError: Se a fila atingiu ``queue_limit``.
            RuntimeError: Se o pool já foi fechado.
        """
        if self._closed:
            raise RuntimeError("BlockingIOProcessor já foi fechado")
        if not self._slots.acquire(blocking=False):
            logger.warning("blocking_io_queue_full", extra={"queue_limit": self.queue_limit})
            raise QueueFullError(f"Fila de I/O bloqueante cheia ({self.queue_limit})")
        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except BaseException:
            self._slots.release()
            raise
        future.add_done_callback(lambda _: self._slots.release())
        return future

    def close(self, wait: bool = True) -> None:
        """Para de aceitar tarefas.

        Args:
            wait: Se True, aguarda as tarefas pendentes terminarem. Se False,
                cancela as que ainda não começaram e retorna sem esperar as
                que estão em execução.
        """
        if self._closed:
            return
        logger.info("blocking_io_processor_stopping", extra={"wait": wait})
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
