"""AsyncHttpClient: cliente httpx único vinculado ao loop de rede.

Um só ``httpx.AsyncClient`` é compartilhado por push e SMS. Ele vive no
loop do TransportHolder; chamadas de outras threads usam ``post_json``,
que devolve um ``concurrent.futures.Future``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from concurrent.futures import Future

    from app.infra.transport import TransportHolder

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HttpClientConfig:
    """Snapshot imutável da configuração do cliente."""

    keep_alive: bool = True
    user_agent: str | None = None
    timeout_seconds: float = 30.0
    max_connections: int = 100
    verify_ssl: bool = True


class HttpError(Exception):
    """Erro de requisição HTTP sem dados sensíveis."""

    def __init__(self, message: str, status_code: int | None = None, is_retryable: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable


def _build_httpx_client(config: HttpClientConfig) -> httpx.AsyncClient:
    limits = httpx.Limits(
        max_connections=config.max_connections,
        max_keepalive_connections=config.max_connections if config.keep_alive else 0,
    )
    client = httpx.AsyncClient(
        limits=limits,
        timeout=config.timeout_seconds,
        verify=config.verify_ssl,
    )
    # httpx injeta "python-httpx/x.y" por padrão; sem user-agent quando None.
    if config.user_agent is None:
        client.headers.pop("User-Agent", None)
    else:
        client.headers["User-Agent"] = config.user_agent
    if not config.keep_alive:
        client.headers["Connection"] = "close"
    return client


class AsyncHttpClient:
    """Cliente de saída que empresta o loop do TransportHolder.

    Args:
        transport_holder: Dono do loop; também fecha este cliente.
        config: Configuração (keep-alive, user-agent, timeout).
    """

    def __init__(self, transport_holder: TransportHolder, config: HttpClientConfig | None = None) -> None:
        self._config = config or HttpClientConfig()
        self._transport = transport_holder
        self._client = _build_httpx_client(self._config)
        transport_holder.bind_client(self)
        logger.info(
            "http_client_created",
            extra={"keep_alive": self._config.keep_alive, "user_agent_set": self._config.user_agent is not None},
        )

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    @property
    def headers(self) -> httpx.Headers:
        return self._client.headers

    async def post(self, url: str, json: dict[str, Any], headers: dict[str, str] | None = None) -> httpx.Response:
        """POST JSON; 429/5xx viram ``HttpError`` retryable."""
        try:
            response = await self._client.post(url, json=json, headers=headers)
        except (httpx.TimeoutException, httpx.ConnectError) as exc:
            raise HttpError("http_connection_error", is_retryable=True) from exc
        if response.status_code == 429 or response.status_code >= 500:
            raise HttpError("http_retryable_status", status_code=response.status_code, is_retryable=True)
        if response.status_code >= 400:
            raise HttpError("http_client_error", status_code=response.status_code)
        return response

    def post_json(self, url: str, json: dict[str, Any], headers: dict[str, str] | None = None) -> Future[httpx.Response]:
        """Agenda ``post`` no loop de rede a partir de qualquer thread."""
        return self._transport.submit(self.post(url, json=json, headers=headers))

    async def aclose(self) -> None:
        await self._client.aclose()
