"""Cliente HTTP de saída compartilhado."""

from app.infra.http.client import AsyncHttpClient, HttpClientConfig, HttpError

__all__ = ["AsyncHttpClient", "HttpClientConfig", "HttpError"]
