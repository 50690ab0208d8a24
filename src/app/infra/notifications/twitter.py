"""Publicação de tweets em nome do usuário (token OAuth 2.0 do usuário)."""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

TWEETS_URL = "https://api.twitter.com/2/tweets"
MAX_TWEET_LENGTH = 280


class TwitterWrapper:
    """Sem dependências na construção; cada envio abre sua conexão."""

    def __init__(self, url: str = TWEETS_URL, timeout_seconds: float = 15.0) -> None:
        self._url = url
        self._timeout = timeout_seconds

    def send(self, user_token: str, message: str) -> str:
        """Publica o tweet (síncrono, usar no pool bloqueante).

        Returns:
            ID do tweet criado.

        Raises:
            ValueError: Token vazio ou mensagem acima do limite.
            httpx.HTTPStatusError: Resposta de erro da API.
        """
        if not user_token:
            raise ValueError("token do Twitter é obrigatório")
        if len(message) > MAX_TWEET_LENGTH:
            raise ValueError(f"tweet acima de {MAX_TWEET_LENGTH} caracteres")
        with httpx.Client(timeout=self._timeout) as client:
            response = client.post(
                self._url,
                json={"text": message},
                headers={"Authorization": f"Bearer {user_token}"},
            )
            response.raise_for_status()
        tweet_id = str(response.json().get("data", {}).get("id", ""))
        logger.debug("tweet_sent", extra={"channel": "twitter"})
        return tweet_id
