"""Cliente de cache/coordenação (Redis)."""

from app.infra.cache.redis_client import TOKEN_PREFIX, RedisClient

__all__ = ["TOKEN_PREFIX", "RedisClient"]
