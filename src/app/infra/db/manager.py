"""DBManager: persistência permanente de usuários no Firestore.

Quando ``enable.db`` está desligado o manager continua satisfazendo o
mesmo contrato, mas como no-op: nenhuma conexão é aberta, leituras
retornam vazio e gravações são descartadas.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from app.domain.user import User

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from concurrent.futures import Future

    from google.cloud.firestore import Client as FirestoreClient

    from app.infra.blocking import BlockingIOProcessor

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class UserDBDaoProtocol(ABC):
    """Contrato de leitura/gravação de usuários."""

    @abstractmethod
    def get_all_users(self, region: str) -> list[User]: ...

    @abstractmethod
    def save_users(self, users: Iterable[User]) -> int: ...


class NoopUserDBDao(UserDBDaoProtocol):
    """Implementação vazia usada com persistência desligada."""

    def get_all_users(self, region: str) -> list[User]:
        return []

    def save_users(self, users: Iterable[User]) -> int:
        return 0


class FirestoreUserDBDao(UserDBDaoProtocol):
    """Usuários na collection ``users``, documento ``<email>:<app_name>``.

    Args:
        firestore_client: Cliente Firestore
        collection_name: Nome da collection (default: users)
    """

    def __init__(self, firestore_client: FirestoreClient, collection_name: str = USERS_COLLECTION) -> None:
        self._db = firestore_client
        self._collection = collection_name

    @staticmethod
    def _doc_id(user: User) -> str:
        return f"{user.email}:{user.app_name}"

    def get_all_users(self, region: str) -> list[User]:
        """Lê todos os usuários da região."""
        query = self._db.collection(self._collection).where("region", "==", region)
        users = [User.model_validate(doc.to_dict()) for doc in query.stream()]
        logger.info("db_users_loaded", extra={"region": region, "users_count": len(users)})
        return users

    def save_users(self, users: Iterable[User]) -> int:
        """Grava usuários em batch; retorna quantos foram gravados."""
        batch = self._db.batch()
        count = 0
        for user in users:
            ref = self._db.collection(self._collection).document(self._doc_id(user))
            batch.set(ref, user.model_dump(mode="json"))
            count += 1
        if count:
            batch.commit()
        logger.debug("db_users_saved", extra={"users_count": count})
        return count


class DBManager:
    """Ponto único de acesso à persistência.

    Args:
        blocking_io_processor: Pool onde as gravações assíncronas rodam.
        enabled: Valor de ``enable.db``.
        client_factory: Cria o cliente Firestore (só chamado se enabled).
    """

    def __init__(
        self,
        blocking_io_processor: BlockingIOProcessor,
        enabled: bool = False,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        self._blocking = blocking_io_processor
        self.enabled = enabled
        self._client: Any | None = None
        if enabled:
            if client_factory is None:
                from app.bootstrap.clients import create_firestore_client

                client_factory = create_firestore_client
            self._client = client_factory()
            self.user_db_dao: UserDBDaoProtocol = FirestoreUserDBDao(self._client)
        else:
            self.user_db_dao = NoopUserDBDao()
        logger.info("db_manager_created", extra={"enabled": enabled})

    def save_users_async(self, users: Iterable[User]) -> Future[int] | None:
        """Agenda gravação no pool; None quando persistência desligada."""
        if not self.enabled:
            return None
        return self._blocking.execute(self.user_db_dao.save_users, list(users))

    def close(self) -> None:
        """Fecha o cliente Firestore, se houver."""
        if self._client is None:
            return
        logger.info("db_manager_stopping")
        close = getattr(self._client, "close", None)
        if callable(close):
            close()
        self._client = None
