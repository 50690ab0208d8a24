"""Agregador de settings do servidor.

Dois níveis de configuração:
- settings de processo (ambiente) em ``config.settings.base``
- bundles ``.properties`` (server, mail, sms, gcm, redis)
"""

from __future__ import annotations

from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.bundles import (
    GCM_PROPERTIES,
    MAIL_PROPERTIES,
    REDIS_PROPERTIES,
    SERVER_PROPERTIES,
    SMS_PROPERTIES,
    PropertyBundles,
    load_bundles,
)
from config.settings.environment import (
    LEAK_DETECTION_ENV,
    EnvironmentGuard,
    apply_environment_guard,
    is_leak_detection_enabled,
)
from config.settings.properties import ServerProperties, parse_properties

__all__ = [
    "GCM_PROPERTIES",
    "LEAK_DETECTION_ENV",
    "MAIL_PROPERTIES",
    "REDIS_PROPERTIES",
    "SERVER_PROPERTIES",
    "SMS_PROPERTIES",
    "BaseSettings",
    "Environment",
    "EnvironmentGuard",
    "PropertyBundles",
    "ServerProperties",
    "apply_environment_guard",
    "get_base_settings",
    "is_leak_detection_enabled",
    "load_bundles",
    "parse_properties",
]
