"""Event loop compartilhado de rede."""

from app.infra.transport.holder import TransportHolder

__all__ = ["TransportHolder"]
