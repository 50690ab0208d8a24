"""Testes do TokenManager."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest

from app.domain.user import Dashboard, Device, Profile, User
from app.infra.blocking import BlockingIOProcessor
from app.infra.cache import RedisClient
from app.services import TokenManager, generate_token


@pytest.fixture
def blocking() -> Iterator[BlockingIOProcessor]:
    processor = BlockingIOProcessor(pool_size=1, queue_limit=10)
    yield processor
    processor.close()


def _user(token: str | None = None) -> User:
    return User(
        email="a@example.com",
        profile=Profile(dashboards=[Dashboard(id=1, devices=[Device(id=0, token=token)])]),
    )


class TestTokenManager:
    """Tokens de dispositivos."""

    def test_cache_built_from_users(self, blocking: BlockingIOProcessor) -> None:
        user = _user(token="tok")
        manager = TokenManager({user.key: user}, blocking, MagicMock(spec=RedisClient), "iot.test")

        value = manager.get_token_value("tok")

        assert value is not None
        assert value.user is user
        assert (value.dash_id, value.device_id) == (1, 0)
        assert len(manager) == 1

    def test_assign_token_replaces_old_and_syncs_redis(self, blocking: BlockingIOProcessor) -> None:
        user = _user(token="old")
        redis_client = MagicMock(spec=RedisClient)
        manager = TokenManager({user.key: user}, blocking, redis_client, "iot.test")

        token = manager.assign_token(user, 1, 0, new_token="new")
        blocking.close()

        assert token == "new"
        assert manager.get_token_value("old") is None
        assert manager.get_token_value("new") is not None
        assert user.profile.dashboards[0].devices[0].token == "new"
        redis_client.remove_token.assert_called_once_with("old")
        redis_client.assign_server_to_token.assert_called_once_with("new", "iot.test")

    def test_assign_token_unknown_device(self, blocking: BlockingIOProcessor) -> None:
        user = _user()
        manager = TokenManager({}, blocking, MagicMock(spec=RedisClient), "iot.test")
        with pytest.raises(KeyError):
            manager.assign_token(user, 1, 99)

    def test_redis_failure_does_not_break_assignment(self, blocking: BlockingIOProcessor) -> None:
        user = _user()
        redis_client = MagicMock(spec=RedisClient)
        redis_client.assign_server_to_token.side_effect = ConnectionError("down")
        manager = TokenManager({}, blocking, redis_client, "iot.test")

        token = manager.assign_token(user, 1, 0)
        blocking.close()

        assert manager.get_token_value(token) is not None

    def test_delete_device_token(self, blocking: BlockingIOProcessor) -> None:
        user = _user(token="tok")
        redis_client = MagicMock(spec=RedisClient)
        manager = TokenManager({user.key: user}, blocking, redis_client, "iot.test")

        assert manager.delete_device_token(user, 1, 0) == "tok"
        assert manager.delete_device_token(user, 1, 0) is None
        blocking.close()

        assert len(manager) == 0
        redis_client.remove_token.assert_called_once_with("tok")

    def test_generated_tokens_are_unique(self) -> None:
        assert len({generate_token() for _ in range(50)}) == 50
