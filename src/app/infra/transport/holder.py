"""TransportHolder: dono do event loop usado por toda a rede de saída.

O loop roda em uma thread dedicada. Clientes que emprestam o loop (ex.:
AsyncHttpClient) se registram via ``bind_client`` e são fechados pelo
próprio holder, antes de o loop parar.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from config.settings.environment import LEAK_DETECTION_ENV, is_leak_detection_enabled

if TYPE_CHECKING:
    from collections.abc import Coroutine, Mapping
    from concurrent.futures import Future

    from config.settings import ServerProperties

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CLOSE_TIMEOUT_SECONDS = 10.0


class LoopBoundClient(Protocol):
    async def aclose(self) -> None: ...


class TransportHolder:
    """Cria e controla o loop de rede.

    Debug do asyncio é ativado quando o nível de detecção de vazamento
    (variável ``LEAK_DETECTION_LEVEL``) não está ``disabled``.

    Args:
        props: Bundle principal do servidor.
        environ: Ambiente de onde a flag é lida (default: ``os.environ``).
    """

    def __init__(self, props: ServerProperties, environ: Mapping[str, str] | None = None) -> None:
        env = os.environ if environ is None else environ
        self.close_timeout = props.get_float("transport.close.timeout.seconds", DEFAULT_CLOSE_TIMEOUT_SECONDS)
        self.debug = is_leak_detection_enabled(env.get(LEAK_DETECTION_ENV))
        self._clients: list[LoopBoundClient] = []
        self._closed = False
        self.worker_loop = asyncio.new_event_loop()
        self.worker_loop.set_debug(self.debug)
        self._started = threading.Event()
        self._thread = threading.Thread(target=self._run, name="transport-loop", daemon=True)
        self._thread.start()
        self._started.wait()
        logger.info("transport_holder_created", extra={"debug": self.debug})

    def _run(self) -> None:
        asyncio.set_event_loop(self.worker_loop)
        self.worker_loop.call_soon(self._started.set)
        self.worker_loop.run_forever()

    @property
    def is_running(self) -> bool:
        return self.worker_loop.is_running()

    def submit(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        """Agenda a coroutine no loop de rede (thread-safe)."""
        if self._closed:
            coro.close()
            raise RuntimeError("TransportHolder já foi fechado")
        return asyncio.run_coroutine_threadsafe(coro, self.worker_loop)

    def bind_client(self, client: LoopBoundClient) -> None:
        """Registra cliente que usa o loop; fechado em ``close()``."""
        self._clients.append(client)

    def close(self) -> None:
        """Fecha clientes vinculados, para o loop e aguarda a thread."""
        if self._closed:
            return
        logger.info("transport_holder_stopping", extra={"bound_clients": len(self._clients)})
        for client in self._clients:
            future = asyncio.run_coroutine_threadsafe(client.aclose(), self.worker_loop)
            try:
                future.result(timeout=self.close_timeout)
            except Exception as exc:
                logger.warning(
                    "transport_client_close_failed",
                    extra={"error_type": type(exc).__name__},
                )
        self._closed = True
        self.worker_loop.call_soon_threadsafe(self.worker_loop.stop)
        self._thread.join(timeout=self.close_timeout)
        if not self.worker_loop.is_running():
            self.worker_loop.close()
