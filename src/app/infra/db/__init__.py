"""Persistência de usuários (Firestore)."""

from app.infra.db.manager import (
    USERS_COLLECTION,
    DBManager,
    FirestoreUserDBDao,
    NoopUserDBDao,
    UserDBDaoProtocol,
)

__all__ = [
    "USERS_COLLECTION",
    "DBManager",
    "FirestoreUserDBDao",
    "NoopUserDBDao",
    "UserDBDaoProtocol",
]
