"""WorkerScheduler: executa os workers periódicos no loop de rede.

Cada worker roda como uma task própria no loop do TransportHolder, uma vez
por intervalo. Falha em um tick é registrada e o próximo tick acontece
normalmente.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future

    from app.infra.transport import TransportHolder
    from app.workers.reading_widgets import ReadingWidgetsWorker
    from app.workers.timer import TimerWorker

logger = logging.getLogger(__name__)

TIMER_INTERVAL_SECONDS = 1.0
READING_WIDGETS_INTERVAL_SECONDS = 1.0


async def _tick_forever(name: str, tick: Callable[[], object], interval: float) -> None:
    while True:
        try:
            tick()
        except Exception as exc:
            logger.warning("worker_tick_failed", extra={"worker": name, "error_type": type(exc).__name__})
        await asyncio.sleep(interval)


class WorkerScheduler:
    """Agenda TimerWorker e ReadingWidgetsWorker no TransportHolder.

    Args:
        transport_holder: Dono do loop onde os ticks rodam.
        timer_worker: Timers de dashboard.
        reading_widgets_worker: Leituras periódicas de widgets.
        timer_interval: Segundos entre ticks do TimerWorker.
        reading_interval: Segundos entre ticks do ReadingWidgetsWorker.
    """

    def __init__(
        self,
        transport_holder: TransportHolder,
        timer_worker: TimerWorker,
        reading_widgets_worker: ReadingWidgetsWorker,
        timer_interval: float = TIMER_INTERVAL_SECONDS,
        reading_interval: float = READING_WIDGETS_INTERVAL_SECONDS,
    ) -> None:
        self._transport = transport_holder
        self._jobs: list[tuple[str, Callable[[], object], float]] = [
            ("timer_worker", timer_worker.run, timer_interval),
            ("reading_widgets_worker", reading_widgets_worker.run, reading_interval),
        ]
        self._running: list[Future[None]] = []

    @property
    def is_running(self) -> bool:
        return any(not future.done() for future in self._running)

    def start(self) -> None:
        if self._running:
            return
        for name, tick, interval in self._jobs:
            self._running.append(self._transport.submit(_tick_forever(name, tick, interval)))
        logger.info("workers_scheduled", extra={"workers": [name for name, _, _ in self._jobs]})

    def stop(self) -> None:
        """Cancela os ticks; idempotente."""
        if not self._running:
            return
        for future in self._running:
            future.cancel()
        self._running.clear()
        logger.info("workers_stopped")
