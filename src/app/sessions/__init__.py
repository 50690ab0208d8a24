"""Sessões de usuário: canais de app e hardware conectados."""

from app.sessions.session import Channel, Session, make_read_body, make_write_body
from app.sessions.session_dao import SessionDao

__all__ = [
    "Channel",
    "Session",
    "SessionDao",
    "make_read_body",
    "make_write_body",
]
