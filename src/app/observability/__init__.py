"""Observabilidade: correlation_id e contadores globais.

Uso:
    from app.observability import GlobalStats, get_correlation_id
"""

from app.observability.correlation import (
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.stats import GlobalStats

__all__ = [
    "GlobalStats",
    "get_correlation_id",
    "reset_correlation_id",
    "set_correlation_id",
]
