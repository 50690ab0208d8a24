"""correlation_id da operação corrente (bootstrap, shutdown, request).

Usa ContextVar para ser thread/async-safe; o filter de logging injeta o
valor em todo record.

Uso:
    token = set_correlation_id()
    try:
        ...  # logs desta operação compartilham o mesmo id
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """correlation_id atual ou string vazia."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id (gera UUID v4 se None); retorna token de reset."""
    return _correlation_id.set(correlation_id or str(uuid.uuid4()))


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o valor anterior."""
    _correlation_id.reset(token)
