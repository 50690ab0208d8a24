"""UserDao: registro em memória dos usuários servidos por esta instância.

O estado inicial vem da restauração (banco ou arquivos); depois disso o
registro é a fonte da verdade em tempo de execução.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.user import User, UserKey

logger = logging.getLogger(__name__)


class UserDao:
    """Mapa thread-safe ``UserKey -> User`` escopado a uma região.

    Args:
        users: Usuários iniciais (mapa por chave ou sequência).
        region: Região desta instância.
    """

    def __init__(self, users: Mapping[UserKey, User] | Iterable[User], region: str) -> None:
        self.region = region
        self._lock = threading.Lock()
        if isinstance(users, Mapping):
            self.users: dict[UserKey, User] = dict(users)
        else:
            self.users = {user.key: user for user in users}
        logger.info("user_dao_created", extra={"region": region, "users_count": len(self.users)})

    def get(self, key: UserKey) -> User | None:
        return self.users.get(key)

    def add(self, user: User) -> None:
        with self._lock:
            self.users[user.key] = user

    def delete(self, key: UserKey) -> User | None:
        with self._lock:
            return self.users.pop(key, None)

    def snapshot(self) -> list[User]:
        with self._lock:
            return list(self.users.values())

    def __contains__(self, key: object) -> bool:
        return key in self.users

    def __len__(self) -> int:
        return len(self.users)
