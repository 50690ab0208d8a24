"""Guarda de ambiente do processo.

O nível de detecção de vazamento de recursos é uma flag global lida por
qualquer componente que inspecione o ambiente (ex.: TransportHolder, que
liga o debug do asyncio). Se ninguém definiu a flag, ela é fixada em
``disabled``; um valor já definido pelo operador nunca é sobrescrito.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping

logger = logging.getLogger(__name__)

LEAK_DETECTION_ENV = "LEAK_DETECTION_LEVEL"
LEAK_DETECTION_DISABLED = "disabled"
LEAK_DETECTION_LEVELS = frozenset({"disabled", "simple", "advanced", "paranoid"})


class EnvironmentGuard:
    """Decisão pura sobre o valor da flag (sem tocar no ambiente)."""

    default: str = LEAK_DETECTION_DISABLED

    @classmethod
    def apply(cls, current_value: str | None) -> str:
        """Retorna o valor que a flag deve ter.

        Idempotente: ``apply(apply(x)) == apply(x)``.
        """
        if current_value is None or not current_value.strip():
            return cls.default
        return current_value


def apply_environment_guard(environ: MutableMapping[str, str] | None = None) -> str:
    """Aplica a guarda sobre ``environ`` (default: ``os.environ``).

    Returns:
        Valor efetivo da flag após a aplicação.
    """
    env = os.environ if environ is None else environ
    current = env.get(LEAK_DETECTION_ENV)
    effective = EnvironmentGuard.apply(current)
    if effective != current:
        env[LEAK_DETECTION_ENV] = effective
        logger.debug("leak_detection_defaulted", extra={"level": effective})
    elif effective.strip().lower() not in LEAK_DETECTION_LEVELS:
        logger.warning("leak_detection_level_unknown", extra={"level": effective})
    return effective


def is_leak_detection_enabled(level: str | None) -> bool:
    """True quando o nível pede rastreamento (qualquer valor != disabled)."""
    normalized = EnvironmentGuard.apply(level).strip().lower()
    return normalized != LEAK_DETECTION_DISABLED
