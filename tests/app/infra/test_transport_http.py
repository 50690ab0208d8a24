"""Testes do TransportHolder e do AsyncHttpClient."""

from __future__ import annotations

import threading
from collections.abc import Iterator

import httpx
import pytest

from app.infra.http import AsyncHttpClient, HttpClientConfig, HttpError
from app.infra.transport import TransportHolder
from config.settings import LEAK_DETECTION_ENV, ServerProperties


@pytest.fixture
def transport() -> Iterator[TransportHolder]:
    holder = TransportHolder(ServerProperties(), environ={})
    yield holder
    holder.close()


def _mock_client(client: AsyncHttpClient, handler) -> None:
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestTransportHolder:
    """Loop de rede em thread dedicada."""

    def test_loop_runs_and_executes_coroutines(self, transport: TransportHolder) -> None:
        async def _answer() -> int:
            return 42

        assert transport.is_running
        assert transport.submit(_answer()).result(timeout=2) == 42

    def test_debug_follows_leak_detection_flag(self) -> None:
        holder = TransportHolder(ServerProperties(), environ={LEAK_DETECTION_ENV: "paranoid"})
        try:
            assert holder.debug is True
            assert holder.worker_loop.get_debug() is True
        finally:
            holder.close()

    def test_close_stops_loop_and_closes_clients(self) -> None:
        holder = TransportHolder(ServerProperties(), environ={})
        closed = threading.Event()

        class _Client:
            async def aclose(self) -> None:
                closed.set()

        holder.bind_client(_Client())
        holder.close()
        holder.close()

        assert closed.is_set()
        assert not holder.is_running

    def test_submit_after_close_raises(self) -> None:
        holder = TransportHolder(ServerProperties(), environ={})
        holder.close()

        async def _noop() -> None:
            return None

        with pytest.raises(RuntimeError):
            holder.submit(_noop())


class TestAsyncHttpClient:
    """Cliente HTTP compartilhado."""

    def test_config_snapshot_is_frozen(self, transport: TransportHolder) -> None:
        client = AsyncHttpClient(transport, HttpClientConfig(keep_alive=False))
        with pytest.raises(AttributeError):
            client.config.keep_alive = True  # type: ignore[misc]

    def test_no_default_user_agent(self, transport: TransportHolder) -> None:
        client = AsyncHttpClient(transport)
        assert "User-Agent" not in client.headers
        assert "Connection" not in client.headers

    def test_keep_alive_disabled_sends_connection_close(self, transport: TransportHolder) -> None:
        client = AsyncHttpClient(transport, HttpClientConfig(keep_alive=False))
        assert client.headers["Connection"] == "close"

    def test_post_json_success(self, transport: TransportHolder) -> None:
        client = AsyncHttpClient(transport)
        _mock_client(client, lambda request: httpx.Response(200, json={"ok": True}))

        response = client.post_json("https://push.test/send", json={"a": 1}).result(timeout=2)

        assert response.json() == {"ok": True}

    @pytest.mark.parametrize(("status", "retryable"), [(429, True), (503, True), (400, False)])
    def test_error_statuses(self, transport: TransportHolder, status: int, retryable: bool) -> None:
        client = AsyncHttpClient(transport)
        _mock_client(client, lambda request: httpx.Response(status))

        with pytest.raises(HttpError) as exc_info:
            client.post_json("https://push.test/send", json={}).result(timeout=2)

        assert exc_info.value.status_code == status
        assert exc_info.value.is_retryable is retryable
