"""Configuração centralizada de logging.

Logging estruturado JSON com campos obrigatórios (correlation_id, service,
region, level, logger, message) e helper para etapas de ciclo de vida.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="iot_hub", region="local")
    logger = get_logger(__name__)
    logger.info("holder_built", extra={"elapsed_ms": 42})

Sem PII: e-mails e tokens nunca entram nos logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import ServiceContextFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "iot_hub"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    region: str = "",
) -> None:
    """Configura logging JSON estruturado para o processo.

    Deve ser chamada uma vez, antes do bootstrap do Holder.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
        region: Região do servidor (opcional).

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(ServiceContextFilter(service_name, correlation_id_getter, region))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado."""
    return logging.getLogger(name)


def log_lifecycle_step(
    logger: logging.Logger,
    component: str,
    action: str,
    elapsed_ms: float | None = None,
    error: BaseException | None = None,
) -> None:
    """Log padronizado de etapa de bootstrap/shutdown.

    Sucesso vai em DEBUG; falha vai em ERROR com o tipo da exceção.

    Args:
        logger: Logger instance.
        component: Subsistema (ex: "blocking_io_processor").
        action: Etapa (ex: "build", "release", "rollback").
        elapsed_ms: Tempo decorrido em ms (quando aplicável).
        error: Exceção capturada, se a etapa falhou.
    """
    extra: dict[str, object] = {
        "component": component,
        "action": action,
        "result": "failed" if error is not None else "ok",
    }
    if elapsed_ms is not None:
        extra["elapsed_ms"] = round(elapsed_ms, 2)
    if error is not None:
        extra["error_type"] = type(error).__name__
        logger.error("lifecycle_step_failed", extra=extra, exc_info=error)
        return
    logger.debug("lifecycle_step", extra=extra)
