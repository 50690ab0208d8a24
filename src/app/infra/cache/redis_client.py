"""RedisClient: roteamento token -> servidor entre instâncias.

Cada token de dispositivo aponta para o host do servidor que o emitiu,
permitindo que um balanceador encaminhe o hardware para a instância certa.

A conexão é lazy: nada é validado na construção, o Redis pode estar fora
do ar até o primeiro uso.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import redis

from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from config.settings import ServerProperties

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "token:"


class RedisClient:
    """Wrapper fino sobre ``redis.Redis`` com erros de infraestrutura.

    Args:
        client: Cliente ``redis.Redis`` já configurado.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_properties(cls, props: ServerProperties) -> RedisClient:
        """Cria cliente a partir do bundle dedicado ``redis.properties``."""
        timeout = props.get_float("redis.timeout.seconds", 5.0)
        client = redis.Redis(
            host=props.get("redis.host", "localhost"),
            port=props.get_int("redis.port", 6379),
            password=props.get("redis.password") or None,
            db=props.get_int("redis.db", 0),
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            retry_on_timeout=True,
        )
        host = client.connection_pool.connection_kwargs.get("host", "unknown")
        logger.info("redis_client_created", extra={"host": host})
        return cls(client)

    @property
    def raw(self) -> redis.Redis:
        return self._redis

    @staticmethod
    def _key(token: str) -> str:
        return f"{TOKEN_PREFIX}{token}"

    def _call(self, operation: str, fn: Any, *args: Any) -> Any:
        try:
            return fn(*args)
        except (redis.ConnectionError, redis.TimeoutError) as exc:
            logger.warning(
                "redis_operation_failed",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise RedisConnectionError(f"Redis indisponível em {operation}") from exc

    def assign_server_to_token(self, token: str, server: str) -> None:
        self._call("assign_server_to_token", self._redis.set, self._key(token), server)

    def get_server_by_token(self, token: str) -> str | None:
        value = self._call("get_server_by_token", self._redis.get, self._key(token))
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else str(value)

    def remove_token(self, *tokens: str) -> int:
        if not tokens:
            return 0
        keys = [self._key(token) for token in tokens]
        return int(self._call("remove_token", self._redis.delete, *keys))

    def ping(self) -> bool:
        return bool(self._call("ping", self._redis.ping))

    def close(self) -> None:
        """Fecha o pool de conexões."""
        logger.info("redis_client_stopping")
        self._redis.close()
