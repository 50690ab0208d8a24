"""Contexto TLS do servidor."""

from app.infra.tls.ssl_context_holder import SslContextHolder, generate_self_signed

__all__ = ["SslContextHolder", "generate_self_signed"]
