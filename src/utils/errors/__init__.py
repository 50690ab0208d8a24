"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    BootstrapError,
    InfrastructureError,
    QueueFullError,
    RedisConnectionError,
    ShutdownError,
)

__all__ = [
    "BootstrapError",
    "InfrastructureError",
    "QueueFullError",
    "RedisConnectionError",
    "ShutdownError",
]
