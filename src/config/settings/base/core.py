"""Settings base do processo.

Configurações lidas do ambiente (não dos bundles ``.properties``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

Environment = Literal["development", "staging", "production"]


@dataclass(frozen=True)
class BaseSettings:
    """Configurações base do processo.

    Attributes:
        environment: Ambiente de execução (development|staging|production)
        service_name: Nome do serviço para logs
        log_level: Nível de log padrão
        config_dir: Diretório com os arquivos ``.properties``
        restore_from_db: Restaura usuários do banco em vez de arquivos
    """

    environment: Environment = "development"
    service_name: str = "iot_hub"
    log_level: str = "INFO"
    config_dir: Path = Path("config")
    restore_from_db: bool = False

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Valida configurações base.

        Returns:
            Lista de erros (vazia = OK).
        """
        errors: list[str] = []
        if not self.service_name:
            errors.append("SERVICE_NAME não pode ser vazio")
        if not self.config_dir.is_dir():
            errors.append(f"CONFIG_DIR inexistente: {self.config_dir}")
        return errors


def _parse_environment(env_str: str) -> Environment:
    """Converte string de ambiente para tipo Environment."""
    env_lower = env_str.lower()
    if env_lower in ("production", "prod"):
        return "production"
    if env_lower in ("staging", "stage"):
        return "staging"
    return "development"


def _load_base_from_env() -> BaseSettings:
    """Carrega BaseSettings de variáveis de ambiente."""
    return BaseSettings(
        environment=_parse_environment(os.getenv("ENVIRONMENT", "development")),
        service_name=os.getenv("SERVICE_NAME", "iot_hub"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        config_dir=Path(os.getenv("CONFIG_DIR", "config")),
        restore_from_db=os.getenv("RESTORE_FROM_DB", "").lower() in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """Retorna instância cacheada de BaseSettings."""
    return _load_base_from_env()
