"""Carregamento dos bundles de propriedades a partir de CONFIG_DIR."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from config.settings.properties import ServerProperties

SERVER_PROPERTIES = "server.properties"
MAIL_PROPERTIES = "mail.properties"
SMS_PROPERTIES = "sms.properties"
GCM_PROPERTIES = "gcm.properties"
REDIS_PROPERTIES = "redis.properties"


@dataclass(frozen=True, slots=True)
class PropertyBundles:
    """Os bundles independentes usados no bootstrap."""

    server: ServerProperties
    mail: ServerProperties
    sms: ServerProperties
    push: ServerProperties
    redis: ServerProperties


def load_bundles(config_dir: Path) -> PropertyBundles:
    """Carrega cada bundle do seu próprio arquivo em ``config_dir``.

    Arquivos ausentes viram bundles vazios (defaults se aplicam).
    """
    return PropertyBundles(
        server=ServerProperties.from_file(config_dir / SERVER_PROPERTIES),
        mail=ServerProperties.from_file(config_dir / MAIL_PROPERTIES),
        sms=ServerProperties.from_file(config_dir / SMS_PROPERTIES),
        push=ServerProperties.from_file(config_dir / GCM_PROPERTIES),
        redis=ServerProperties.from_file(config_dir / REDIS_PROPERTIES),
    )
