"""Filters de logging para injeção de contexto.

Campos injetados:
- correlation_id: ID de rastreamento da operação
- service: Nome do serviço (ex: iot_hub)
- region: Região do servidor
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class ServiceContextFilter(logging.Filter):
    """Injeta correlation_id, service e region em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia.
        region: Região do servidor.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        region: str = "",
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")
        self._region = region

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; nunca descarta.

        correlation_id e region passados via ``extra`` são preservados.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        if not getattr(record, "region", None):
            record.region = self._region
        return True
