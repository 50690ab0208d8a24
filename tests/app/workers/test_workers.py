"""Testes de TimerWorker e ReadingWidgetsWorker."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from app.domain.user import Dashboard, Profile, Timer, User, Widget
from app.infra.notifications import GCMWrapper
from app.sessions import SessionDao
from app.users import UserDao
from app.workers import ReadingWidgetsWorker, TimerWorker
from app.workers.timer import second_of_day

NOON = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


def _timer_user(notify: bool = False) -> User:
    timer = Timer(id=1, device_id=0, pin=3, pin_type="digital", start_time=12 * 3600, start_value="1", notify=notify)
    return User(
        email="a@example.com",
        push_tokens=["push-1"],
        profile=Profile(dashboards=[Dashboard(id=7, timers=[timer, Timer(id=2, pin=4)])]),
    )


def _widget_user(active: bool = True) -> User:
    widget = Widget(id=1, device_id=0, pin=5, pin_type="virtual", frequency_ms=1000)
    return User(
        email="a@example.com",
        profile=Profile(dashboards=[Dashboard(id=7, is_active=active, widgets=[widget, Widget(id=2, pin=6)])]),
    )


class TestTimerWorker:
    """Timers por segundo do dia."""

    def test_second_of_day(self) -> None:
        assert second_of_day(NOON) == 43200

    def test_fires_matching_timer_to_hardware(self) -> None:
        user = _timer_user()
        sessions = SessionDao()
        board = MagicMock()
        sessions.get_or_create(user.key).add_hardware_channel(board, 7, 0)
        gcm = MagicMock(spec=GCMWrapper)
        worker = TimerWorker(UserDao([user], "local"), sessions, gcm)

        assert worker.run(NOON) == 1

        board.send.assert_called_once_with("dw 3 1")
        gcm.send.assert_not_called()

    def test_other_seconds_do_not_fire(self) -> None:
        worker = TimerWorker(UserDao([_timer_user()], "local"), SessionDao(), MagicMock(spec=GCMWrapper))
        assert worker.run(NOON.replace(second=1)) == 0

    def test_notify_sends_push(self) -> None:
        user = _timer_user(notify=True)
        gcm = MagicMock(spec=GCMWrapper)
        gcm.is_configured = True
        worker = TimerWorker(UserDao([user], "local"), SessionDao(), gcm)

        worker.run(NOON)

        assert gcm.send.call_args[0][0] == "push-1"

    def test_failed_push_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        failed: Future[object] = Future()
        failed.set_exception(ConnectionError("fcm fora"))
        gcm = MagicMock(spec=GCMWrapper)
        gcm.is_configured = True
        gcm.send.return_value = failed
        worker = TimerWorker(UserDao([_timer_user(notify=True)], "local"), SessionDao(), gcm)

        with caplog.at_level(logging.WARNING, logger="app.workers.timer"):
            assert worker.run(NOON) == 1

        failures = [r for r in caplog.records if r.getMessage() == "timer_push_failed"]
        assert [r.error_type for r in failures] == ["ConnectionError"]


class TestReadingWidgetsWorker:
    """Leituras periódicas."""

    def _setup(self, user: User, app_connected: bool = True) -> tuple[ReadingWidgetsWorker, MagicMock]:
        sessions = SessionDao()
        session = sessions.get_or_create(user.key)
        board = MagicMock()
        session.add_hardware_channel(board, 7, 0)
        if app_connected:
            session.add_app_channel(MagicMock())
        return ReadingWidgetsWorker(sessions, UserDao([user], "local")), board

    def test_sends_read_respecting_frequency(self) -> None:
        worker, board = self._setup(_widget_user())

        assert worker.run(now_ms=10_000) == 1
        assert worker.run(now_ms=10_500) == 0
        assert worker.run(now_ms=11_000) == 1

        board.send.assert_called_with("vr 5")

    def test_requires_app_connected(self) -> None:
        worker, board = self._setup(_widget_user(), app_connected=False)
        assert worker.run(now_ms=10_000) == 0
        board.send.assert_not_called()

    def test_inactive_dashboard_is_skipped(self) -> None:
        worker, _ = self._setup(_widget_user(active=False))
        assert worker.run(now_ms=10_000) == 0

    def test_forget_resets_history(self) -> None:
        user = _widget_user()
        worker, _ = self._setup(user)
        worker.run(now_ms=10_000)

        worker.forget(user.key)

        assert worker.run(now_ms=10_100) == 1
