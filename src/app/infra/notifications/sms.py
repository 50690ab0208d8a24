"""SMS via API REST do Nexmo/Vonage."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from concurrent.futures import Future

    import httpx

    from app.infra.http import AsyncHttpClient
    from config.settings import ServerProperties

logger = logging.getLogger(__name__)

DEFAULT_SMS_URL = "https://rest.nexmo.com/sms/json"
DEFAULT_SMS_FROM = "IoT Hub"


class SMSWrapper:
    """Envia SMS usando o cliente HTTP compartilhado.

    Args:
        props: Bundle ``sms.properties`` (``nexmo.api.key``,
            ``nexmo.api.secret``, ``sms.from``, ``sms.url``).
        http_client: Cliente HTTP compartilhado.
    """

    def __init__(self, props: ServerProperties, http_client: AsyncHttpClient) -> None:
        self._key = props.get("nexmo.api.key", "")
        self._secret = props.get("nexmo.api.secret", "")
        self._sender = props.get("sms.from", DEFAULT_SMS_FROM)
        self._url = props.get("sms.url", DEFAULT_SMS_URL)
        self._http = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self._key and self._secret)

    def send(self, to: str, text: str) -> Future[httpx.Response]:
        """Agenda envio de SMS; não bloqueia.

        Raises:
            ValueError: Se credenciais ausentes ou destino vazio.
        """
        if not self.is_configured:
            raise ValueError("nexmo.api.key/nexmo.api.secret não configurados")
        if not to:
            raise ValueError("destino do SMS é obrigatório")
        payload = {
            "api_key": self._key,
            "api_secret": self._secret,
            "from": self._sender,
            "to": to,
            "text": text,
        }
        logger.debug("sms_scheduled", extra={"channel": "sms"})
        return self._http.post_json(self._url, json=payload)
