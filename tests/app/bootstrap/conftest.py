"""Fixtures compartilhadas da montagem do Holder."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from app.bootstrap import BootstrapProviders, Holder, NotificationWrappers
from app.infra.cache import RedisClient
from app.infra.notifications import GCMWrapper, MailWrapper, SMSWrapper, TwitterWrapper
from config.settings import ServerProperties
from utils.errors import ShutdownError


@pytest.fixture
def data_folder(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def server_props(data_folder: Path) -> ServerProperties:
    return ServerProperties.from_mapping(
        {"data.folder": str(data_folder), "server.host": "iot.test"},
    )


@pytest.fixture
def environ() -> dict[str, str]:
    return {}


@pytest.fixture
def redis_client() -> MagicMock:
    return MagicMock(spec=RedisClient)


@pytest.fixture
def providers(redis_client: MagicMock, environ: dict[str, str]) -> BootstrapProviders:
    return BootstrapProviders(
        redis_client_factory=lambda _props: redis_client,
        environ=environ,
    )


@pytest.fixture
def notifications() -> NotificationWrappers:
    return NotificationWrappers(
        twitter=MagicMock(spec=TwitterWrapper),
        mail=MagicMock(spec=MailWrapper),
        push=MagicMock(spec=GCMWrapper),
        sms=MagicMock(spec=SMSWrapper),
    )


@pytest.fixture
def empty_props() -> ServerProperties:
    return ServerProperties()


@pytest.fixture
def holders() -> Iterator[list[Holder]]:
    """Coleta Holders criados no teste e os libera ao final."""
    created: list[Holder] = []
    yield created
    for holder in created:
        try:
            holder.close()
        except ShutdownError:
            pass
