"""GlobalStats: contadores de comandos processados pelo servidor.

Os contadores são publicados como log estruturado (``metric_global_stats``)
e podem ser agregados depois, como as demais métricas do serviço.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter

logger = logging.getLogger(__name__)


class GlobalStats:
    """Contadores thread-safe por nome de comando/evento."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: Counter[str] = Counter()

    def mark(self, name: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[name] += amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counters[name]

    def snapshot(self, reset: bool = False) -> dict[str, int]:
        """Cópia dos contadores; ``reset`` zera após copiar."""
        with self._lock:
            data = dict(self._counters)
            if reset:
                self._counters.clear()
        return data

    def report(self, reset: bool = True) -> dict[str, int]:
        """Publica os contadores em log e retorna o snapshot."""
        data = self.snapshot(reset=reset)
        logger.info(
            "metric_global_stats",
            extra={"metric_type": "counter", "component": "global_stats", "counters": data},
        )
        return data
