"""Bootstrap da aplicação: inicialização e wiring.

Este módulo é o composition root: configura logging e monta o Holder com
todos os subsistemas do servidor.

Uso:
    from app.bootstrap import RestoreMode, build_holder, initialize_app

    # Na inicialização do serviço
    initialize_app()
    holder = build_holder(server, mail, sms, push, RestoreMode.FROM_FILE)

    # No encerramento
    holder.close()
"""

from __future__ import annotations

import logging
import os

from app.bootstrap.builder import (
    PRODUCTION,
    TEST,
    BootstrapProfile,
    BootstrapProviders,
    NotificationWrappers,
    build_holder,
    build_test_holder,
    create_notification_wrappers,
    restore_users,
)
from app.bootstrap.holder import Holder, RestoreMode, shutdown_holder
from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import get_base_settings

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Configura o logging a partir das settings base do processo.

    Deve ser chamada uma vez no início do serviço, antes do Holder.
    """
    settings = get_base_settings()
    configure_logging(
        level=settings.log_level,
        service_name=settings.service_name,
        correlation_id_getter=get_correlation_id,
        region=os.getenv("REGION", ""),
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    settings = get_base_settings()
    strict_mode = settings.environment in STRICT_VALIDATION_ENVS
    errors = settings.validate()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": settings.environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": settings.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {settings.environment}:\n{details}")


__all__ = [
    "PRODUCTION",
    "TEST",
    "BootstrapProfile",
    "BootstrapProviders",
    "Holder",
    "NotificationWrappers",
    "RestoreMode",
    "build_holder",
    "build_test_holder",
    "create_notification_wrappers",
    "initialize_app",
    "restore_users",
    "shutdown_holder",
    "validate_runtime_settings",
]
