"""Push via Firebase Cloud Messaging (API legada ``fcm/send``)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from concurrent.futures import Future

    import httpx

    from app.infra.http import AsyncHttpClient
    from config.settings import ServerProperties

logger = logging.getLogger(__name__)

DEFAULT_GCM_URL = "https://fcm.googleapis.com/fcm/send"


class GCMWrapper:
    """Envia push para os tokens registrados pelo app.

    Args:
        props: Bundle ``gcm.properties`` (``gcm.api.key``, ``gcm.server``).
        http_client: Cliente HTTP compartilhado.
    """

    def __init__(self, props: ServerProperties, http_client: AsyncHttpClient) -> None:
        self._api_key = props.get("gcm.api.key", "")
        self._url = props.get("gcm.server", DEFAULT_GCM_URL)
        self._http = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def send(self, token: str, title: str, body: str) -> Future[httpx.Response]:
        """Agenda envio de push; não bloqueia.

        Raises:
            ValueError: Se ``gcm.api.key`` não está configurado ou token vazio.
        """
        if not self.is_configured:
            raise ValueError("gcm.api.key não configurado")
        if not token:
            raise ValueError("token de push é obrigatório")
        payload = {
            "to": token,
            "priority": "high",
            "notification": {"title": title, "body": body},
        }
        headers = {"Authorization": f"key={self._api_key}"}
        logger.debug("push_scheduled", extra={"channel": "gcm"})
        return self._http.post_json(self._url, json=payload, headers=headers)
