"""ReportingDao: agrega valores de pinos e grava médias em CSV.

Valores recebidos são somados em memória por (usuário, dashboard, pino) e
por minuto. ``flush`` grava uma linha ``timestamp_ms,média`` no arquivo do
pino; ``close`` faz o flush final.

Layout::

    <reporting_folder>/<email>/history_<dash_id>_<pin_type><pin>_minute.csv
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from app.domain.user import PinType, UserKey
    from config.settings import ServerProperties

logger = logging.getLogger(__name__)

MINUTE_MS = 60_000
_PIN_PREFIX = {"digital": "d", "analog": "a", "virtual": "v"}


class AggregationKey(NamedTuple):
    email: str
    app_name: str
    dash_id: int
    pin_type: str
    pin: int
    minute_ts: int


@dataclass(slots=True)
class _Average:
    total: float = 0.0
    count: int = 0

    def update(self, value: float) -> None:
        self.total += value
        self.count += 1

    @property
    def value(self) -> float:
        return self.total / self.count if self.count else 0.0


class ReportingDao:
    """Agregador de médias por minuto com persistência em CSV.

    Args:
        reporting_folder: Pasta base dos CSVs; criada se não existir.
        props: Bundle principal (``enable.reporting``, default true).
    """

    def __init__(self, reporting_folder: str | Path, props: ServerProperties) -> None:
        self.folder = Path(reporting_folder)
        self.enabled = props.get_bool("enable.reporting", True)
        self._lock = threading.Lock()
        self._averages: dict[AggregationKey, _Average] = {}
        self._closed = False
        if self.enabled:
            self.folder.mkdir(parents=True, exist_ok=True)
        logger.info("reporting_dao_created", extra={"enabled": self.enabled})

    def csv_path(self, key: AggregationKey) -> Path:
        prefix = _PIN_PREFIX.get(key.pin_type, "v")
        return self.folder / key.email / f"history_{key.dash_id}_{prefix}{key.pin}_minute.csv"

    def process(
        self,
        user_key: UserKey,
        dash_id: int,
        pin_type: PinType,
        pin: int,
        value: float,
        ts_ms: int | None = None,
    ) -> None:
        """Acumula um valor recebido do hardware."""
        if not self.enabled or self._closed:
            return
        now_ms = ts_ms if ts_ms is not None else int(time.time() * 1000)
        key = AggregationKey(
            user_key.email,
            user_key.app_name,
            dash_id,
            pin_type,
            pin,
            now_ms // MINUTE_MS * MINUTE_MS,
        )
        with self._lock:
            self._averages.setdefault(key, _Average()).update(value)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._averages)

    def flush(self) -> int:
        """Grava as médias acumuladas; retorna o número de linhas gravadas."""
        with self._lock:
            snapshot, self._averages = self._averages, {}
        for key, average in snapshot.items():
            path = self.csv_path(key)
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as handle:
                handle.write(f"{key.minute_ts},{average.value}\n")
        if snapshot:
            logger.debug("reporting_flushed", extra={"rows": len(snapshot)})
        return len(snapshot)

    def close(self) -> None:
        """Flush final; depois disso novos valores são ignorados."""
        if self._closed:
            return
        logger.info("reporting_dao_stopping")
        self._closed = True
        if self.enabled:
            self.flush()
