"""Registro de usuários em memória."""

from app.users.user_dao import UserDao

__all__ = ["UserDao"]
