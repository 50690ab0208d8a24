"""Factories de clientes externos: Redis, Firestore e HTTP.

Nenhum factory valida conexão na construção: Redis e Firestore conectam
sob demanda e o cliente HTTP só abre sockets no primeiro envio.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from app.infra.cache import RedisClient
from app.infra.http import AsyncHttpClient, HttpClientConfig

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

    from app.infra.transport import TransportHolder
    from config.settings import ServerProperties

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Redis
# ──────────────────────────────────────────────────────────────────────────────


def create_redis_client(redis_props: ServerProperties) -> RedisClient:
    """Cria o cliente de cache a partir do bundle ``redis.properties``.

    Returns:
        RedisClient com conexão lazy
    """
    return RedisClient.from_properties(redis_props)


# ──────────────────────────────────────────────────────────────────────────────
# Firestore
# ──────────────────────────────────────────────────────────────────────────────


def create_firestore_client() -> FirestoreClient:
    """Cria cliente Firestore do projeto ``GCP_PROJECT``.

    Returns:
        Cliente Firestore
    """
    from google.cloud import firestore

    project_id = os.getenv("GCP_PROJECT") or os.getenv("FIRESTORE_PROJECT_ID")
    client = firestore.Client(project=project_id)
    logger.info("firestore_client_created", extra={"project": project_id})
    return client


# ──────────────────────────────────────────────────────────────────────────────
# HTTP
# ──────────────────────────────────────────────────────────────────────────────


def create_http_client(transport_holder: TransportHolder, *, keep_alive: bool) -> AsyncHttpClient:
    """Cria o cliente HTTP compartilhado, sem user-agent padrão."""
    return AsyncHttpClient(transport_holder, HttpClientConfig(keep_alive=keep_alive, user_agent=None))
