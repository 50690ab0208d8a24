"""SslContextHolder: contexto TLS dos listeners do servidor.

Usa o certificado configurado (``server.ssl.cert`` + ``server.ssl.key``).
Sem certificado configurado, gera um autoassinado em
``<data.folder>/tls/`` e o reaproveita enquanto for válido. O e-mail de
contato vai no subject do certificado gerado.
"""

from __future__ import annotations

import logging
import os
import ssl
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

if TYPE_CHECKING:
    from config.settings import ServerProperties

logger = logging.getLogger(__name__)

TLS_FOLDER_NAME = "tls"
SELF_SIGNED_CERT = "self-signed.crt"
SELF_SIGNED_KEY = "self-signed.key"
SELF_SIGNED_VALID_DAYS = 365
RENEW_BEFORE_DAYS = 7
KEY_FILE_MODE = 0o600


def generate_self_signed(host: str, contact_email: str, cert_path: Path, key_path: Path) -> x509.Certificate:
    """Gera par chave EC P-256 + certificado autoassinado em PEM."""
    key = ec.generate_private_key(ec.SECP256R1())
    attributes = [x509.NameAttribute(NameOID.COMMON_NAME, host)]
    if contact_email:
        attributes.append(x509.NameAttribute(NameOID.EMAIL_ADDRESS, contact_email))
    subject = x509.Name(attributes)
    now = datetime.now(UTC)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=1))
        .not_valid_after(now + timedelta(days=SELF_SIGNED_VALID_DAYS))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(host)]), critical=False)
        .sign(key, hashes.SHA256())
    )
    cert_path.parent.mkdir(parents=True, exist_ok=True)
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KEY_FILE_MODE)
    with os.fdopen(fd, "wb") as key_file:
        # O_CREAT não altera o modo de um arquivo já existente.
        os.fchmod(key_file.fileno(), KEY_FILE_MODE)
        key_file.write(key_pem)
    cert_path.write_bytes(certificate.public_bytes(serialization.Encoding.PEM))
    return certificate


class SslContextHolder:
    """Mantém o ``ssl.SSLContext`` e os metadados do certificado em uso.

    Args:
        props: Bundle principal do servidor.
        contact_email: E-mail de contato do operador.
    """

    def __init__(self, props: ServerProperties, contact_email: str | None) -> None:
        self.contact_email = contact_email or ""
        self.host = props.get_server_host()
        cert = props.get("server.ssl.cert", "")
        key = props.get("server.ssl.key", "")
        self._key_password = props.get("server.ssl.key.pass") or None
        if cert and key:
            self.cert_path, self.key_path = Path(cert), Path(key)
            self.is_self_signed = False
        else:
            tls_dir = Path(props.get("data.folder", ".")) / TLS_FOLDER_NAME
            self.cert_path = tls_dir / SELF_SIGNED_CERT
            self.key_path = tls_dir / SELF_SIGNED_KEY
            self.is_self_signed = True
            if self._needs_generation():
                generate_self_signed(self.host, self.contact_email, self.cert_path, self.key_path)
                logger.info("self_signed_certificate_generated", extra={"host": self.host})
        self.certificate = x509.load_pem_x509_certificate(self.cert_path.read_bytes())
        self.ssl_context = self._build_context()
        logger.info(
            "ssl_context_created",
            extra={"self_signed": self.is_self_signed, "expires_at": self.expires_at.isoformat()},
        )

    @property
    def expires_at(self) -> datetime:
        return self.certificate.not_valid_after_utc

    def is_expiring(self, within_days: int = RENEW_BEFORE_DAYS) -> bool:
        return self.expires_at - datetime.now(UTC) <= timedelta(days=within_days)

    def _needs_generation(self) -> bool:
        if not (self.cert_path.is_file() and self.key_path.is_file()):
            return True
        existing = x509.load_pem_x509_certificate(self.cert_path.read_bytes())
        return existing.not_valid_after_utc - datetime.now(UTC) <= timedelta(days=RENEW_BEFORE_DAYS)

    def _build_context(self) -> ssl.SSLContext:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        context.load_cert_chain(self.cert_path, self.key_path, password=self._key_password)
        return context
