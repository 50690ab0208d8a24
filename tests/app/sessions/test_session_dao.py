"""Testes de Session e SessionDao."""

from __future__ import annotations

from unittest.mock import MagicMock

from app.domain.user import UserKey
from app.sessions import Session, SessionDao, make_read_body, make_write_body

KEY = UserKey("a@example.com", "iot_hub")


class TestBodies:
    def test_write_and_read_bodies(self) -> None:
        assert make_write_body("virtual", 5, "10") == "vw 5 10"
        assert make_write_body("digital", 2, "1") == "dw 2 1"
        assert make_read_body("analog", 7) == "ar 7"


class TestSession:
    """Canais de app e hardware."""

    def test_send_to_hardware_targets_device(self) -> None:
        session = Session(KEY)
        board, other = MagicMock(), MagicMock()
        session.add_hardware_channel(board, dash_id=1, device_id=0)
        session.add_hardware_channel(other, dash_id=1, device_id=1)

        assert session.send_to_hardware(1, 0, "vw 1 1") == 1
        board.send.assert_called_once_with("vw 1 1")
        other.send.assert_not_called()

    def test_failed_channel_is_skipped(self) -> None:
        session = Session(KEY)
        broken, ok = MagicMock(), MagicMock()
        broken.send.side_effect = OSError("closed")
        session.add_app_channel(broken)
        session.add_app_channel(ok)

        assert session.send_to_apps("hello") == 1
        ok.send.assert_called_once_with("hello")

    def test_connection_state(self) -> None:
        session = Session(KEY)
        app, board = MagicMock(), MagicMock()
        assert session.is_empty
        session.add_app_channel(app)
        session.add_hardware_channel(board, 1, 0)

        assert session.is_app_connected
        assert session.is_hardware_connected(1)
        assert session.is_hardware_connected(1, 0)
        assert not session.is_hardware_connected(2)

        assert session.remove_channel(board) is True
        assert session.remove_channel(app) is True
        assert session.remove_channel(app) is False
        assert session.is_empty


class TestSessionDao:
    def test_starts_empty(self) -> None:
        assert len(SessionDao()) == 0

    def test_get_or_create_returns_same_session(self) -> None:
        dao = SessionDao()
        assert dao.get_or_create(KEY) is dao.get_or_create(KEY)
        assert dao.get(KEY) is not None

    def test_remove_if_empty(self) -> None:
        dao = SessionDao()
        session = dao.get_or_create(KEY)
        session.add_app_channel(MagicMock())
        assert dao.remove_if_empty(KEY) is False

        dao.remove(KEY)
        assert dao.get(KEY) is None
