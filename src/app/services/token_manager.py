"""TokenManager: emissão e resolução de tokens de dispositivo.

Mantém o índice ``token -> (usuário, dashboard, dispositivo)`` em memória
e publica no Redis o host que emitiu cada token, via pool bloqueante.
"""

from __future__ import annotations

import logging
import secrets
import threading
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from concurrent.futures import Future

    from app.domain.user import User, UserKey
    from app.infra.blocking import BlockingIOProcessor
    from app.infra.cache import RedisClient

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


class TokenValue(NamedTuple):
    user: User
    dash_id: int
    device_id: int


def generate_token() -> str:
    """Token hexadecimal de 32 caracteres."""
    return secrets.token_hex(TOKEN_BYTES)


class TokenManager:
    """Índice de tokens construído a partir dos usuários restaurados.

    Args:
        users: Mapa de usuários do UserDao (compartilhado, não copiado).
        blocking_io_processor: Pool para chamadas ao Redis.
        redis_client: Roteamento token -> host.
        host: Host anunciado por esta instância.
    """

    def __init__(
        self,
        users: Mapping[UserKey, User],
        blocking_io_processor: BlockingIOProcessor,
        redis_client: RedisClient,
        host: str,
    ) -> None:
        self._blocking = blocking_io_processor
        self._redis = redis_client
        self.host = host
        self._lock = threading.Lock()
        self._cache: dict[str, TokenValue] = {}
        for user in users.values():
            for dash in user.profile.dashboards:
                for device in dash.devices:
                    if device.token:
                        self._cache[device.token] = TokenValue(user, dash.id, device.id)
        logger.info("token_manager_created", extra={"tokens_count": len(self._cache)})

    def get_token_value(self, token: str) -> TokenValue | None:
        with self._lock:
            return self._cache.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def assign_token(self, user: User, dash_id: int, device_id: int, new_token: str | None = None) -> str:
        """Emite (ou reemite) o token do dispositivo.

        Raises:
            KeyError: Dashboard ou dispositivo inexistente.
        """
        dash = user.profile.get_dashboard(dash_id)
        device = dash.get_device(device_id) if dash else None
        if device is None:
            raise KeyError(f"dispositivo {dash_id}/{device_id} inexistente")
        token = new_token or generate_token()
        old_token = device.token
        with self._lock:
            if old_token:
                self._cache.pop(old_token, None)
            self._cache[token] = TokenValue(user, dash_id, device_id)
        device.token = token
        user.touch()
        if old_token:
            self._schedule("remove_token", self._redis.remove_token, old_token)
        self._schedule("assign_server_to_token", self._redis.assign_server_to_token, token, self.host)
        return token

    def delete_device_token(self, user: User, dash_id: int, device_id: int) -> str | None:
        """Revoga o token do dispositivo; retorna o token removido."""
        dash = user.profile.get_dashboard(dash_id)
        device = dash.get_device(device_id) if dash else None
        if device is None or not device.token:
            return None
        token = device.token
        with self._lock:
            self._cache.pop(token, None)
        device.token = None
        user.touch()
        self._schedule("remove_token", self._redis.remove_token, token)
        return token

    def _schedule(self, operation: str, fn: Callable[..., object], *args: object) -> Future[object]:
        future = self._blocking.execute(fn, *args)
        future.add_done_callback(lambda f: _log_failure(operation, f))
        return future


def _log_failure(operation: str, future: Future[object]) -> None:
    exc = future.exception()
    if exc is not None:
        logger.warning(
            "token_redis_sync_failed",
            extra={"operation": operation, "error_type": type(exc).__name__},
        )
