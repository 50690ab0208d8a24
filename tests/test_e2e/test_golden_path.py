"""Teste E2E do golden path: arquivos -> Holder -> hardware -> shutdown."""

from __future__ import annotations

from concurrent.futures import Future
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock

from app.bootstrap import BootstrapProviders, NotificationWrappers, build_test_holder
from app.domain.user import Dashboard, Device, EventorRule, Profile, Timer, User
from app.infra.cache import RedisClient
from app.infra.files import FileManager
from app.infra.notifications import GCMWrapper, MailWrapper, SMSWrapper, TwitterWrapper
from config.settings import ServerProperties


def _seed_user(data_folder: Path) -> User:
    dashboard = Dashboard(
        id=1,
        is_active=True,
        devices=[Device(id=0, name="estufa", token="hw-token")],
        timers=[Timer(id=1, pin=2, pin_type="digital", start_time=6 * 3600, start_value="1")],
        rules=[EventorRule(pin=5, condition=">", threshold=30, action="notify", message="quente")],
    )
    user = User(email="ana@example.com", push_tokens=["push-1"], profile=Profile(dashboards=[dashboard]))
    FileManager(data_folder).overwrite_user_file(user)
    return user


def test_golden_path(tmp_path: Path) -> None:
    data_folder = tmp_path / "data"
    seeded = _seed_user(data_folder)
    notifications = NotificationWrappers(
        twitter=MagicMock(spec=TwitterWrapper),
        mail=MagicMock(spec=MailWrapper),
        push=MagicMock(spec=GCMWrapper),
        sms=MagicMock(spec=SMSWrapper),
    )
    delivered: Future[object] = Future()
    delivered.set_result(None)
    notifications.push.send.return_value = delivered
    redis_client = MagicMock(spec=RedisClient)
    providers = BootstrapProviders(redis_client_factory=lambda _props: redis_client, environ={})
    props = ServerProperties.from_mapping({"data.folder": str(data_folder), "server.host": "iot.test"})

    holder = build_test_holder(props, notifications, providers=providers)
    try:
        # Hardware se conecta com o token restaurado do arquivo
        token_value = holder.token_manager.get_token_value("hw-token")
        assert token_value is not None
        user = token_value.user
        assert user.key == seeded.key

        board = MagicMock()
        session = holder.session_dao.get_or_create(user.key)
        session.add_hardware_channel(board, token_value.dash_id, token_value.device_id)

        # Escrita do hardware: reporting + regra de evento
        holder.reporting_dao.process(user.key, 1, "virtual", 5, 31.0, ts_ms=0)
        fired = holder.eventor_processor.process(user, 1, 0, "virtual", 5, "31")
        assert fired == 1
        notifications.push.send.assert_called_once_with("push-1", "IoT Hub", "quente")
        assert holder.stats.get("eventor_notify") == 1

        # Timer das 06:00 aciona o hardware
        assert holder.timer_worker.run(datetime(2024, 1, 1, 6, 0, 0, tzinfo=UTC)) == 1
        board.send.assert_called_once_with("dw 2 1")
    finally:
        holder.close()

    # Shutdown grava o CSV pendente
    assert list((data_folder / "data").rglob("*.csv"))
    redis_client.close.assert_called_once()
