"""Serviços de domínio do servidor."""

from app.services.eventor import EventorProcessor
from app.services.limits import Limits
from app.services.token_manager import TokenManager, TokenValue, generate_token

__all__ = [
    "EventorProcessor",
    "Limits",
    "TokenManager",
    "TokenValue",
    "generate_token",
]
