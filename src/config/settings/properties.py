"""Bundles de propriedades do servidor.

Cada bundle (server, mail, sms, gcm, redis) é um mapeamento imutável
string -> string carregado de um arquivo ``.properties``. Os bundles são
independentes entre si e nunca são mesclados.

Uso:
    props = ServerProperties.from_file(Path("server.properties"))
    pool_size = props.get_int("blocking.processor.thread.pool.limit", 6)
    enable_db = props.get_bool("enable.db")
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_COMMENT_PREFIXES = ("#", "!")


class ServerProperties(Mapping[str, str]):
    """Bundle imutável de configuração com acessores tipados.

    Leituras com default nunca falham: chave ausente retorna o default.
    Valores malformados para ``get_int`` levantam ``ValueError``.

    Args:
        values: Pares chave/valor já carregados.
        source: Origem do bundle (arquivo ou descrição), usada em logs.
    """

    __slots__ = ("_source", "_values")

    def __init__(self, values: Mapping[str, str] | None = None, source: str = "<memory>") -> None:
        self._values = MappingProxyType({str(k): str(v) for k, v in (values or {}).items()})
        self._source = source

    @classmethod
    def from_mapping(cls, values: Mapping[str, object], source: str = "<memory>") -> ServerProperties:
        """Cria bundle a partir de um dict (valores convertidos para str)."""
        return cls({k: str(v) for k, v in values.items()}, source=source)

    @classmethod
    def from_file(cls, path: Path) -> ServerProperties:
        """Carrega bundle de um arquivo ``.properties``.

        Arquivo inexistente resulta em bundle vazio (defaults se aplicam).
        """
        if not path.is_file():
            logger.warning("properties_file_missing", extra={"source": str(path)})
            return cls(source=str(path))
        values = parse_properties(path.read_text(encoding="utf-8"))
        logger.info(
            "properties_loaded",
            extra={"source": str(path), "keys_count": len(values)},
        )
        return cls(values, source=str(path))

    @property
    def source(self) -> str:
        return self._source

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ServerProperties(source={self._source!r}, keys={len(self._values)})"

    def get_int(self, key: str, default: int) -> int:
        """Lê inteiro; chave ausente ou vazia retorna ``default``."""
        raw = self._values.get(key, "").strip()
        if not raw:
            return default
        return int(raw)

    def get_float(self, key: str, default: float) -> float:
        """Lê float; chave ausente ou vazia retorna ``default``."""
        raw = self._values.get(key, "").strip()
        if not raw:
            return default
        return float(raw)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Lê booleano (true/1/yes/on); chave ausente retorna ``default``."""
        raw = self._values.get(key)
        if raw is None or not raw.strip():
            return default
        return raw.strip().lower() in _TRUE_VALUES

    def get_server_host(self) -> str:
        """Host anunciado pelo servidor (``server.host`` ou FQDN da máquina)."""
        host = self._values.get("server.host", "").strip()
        return host or socket.getfqdn()

    def with_overrides(self, overrides: Mapping[str, object]) -> ServerProperties:
        """Retorna novo bundle com chaves sobrescritas (o original não muda)."""
        merged = {**self._values, **{k: str(v) for k, v in overrides.items()}}
        return ServerProperties(merged, source=self._source)


def parse_properties(text: str) -> dict[str, str]:
    """Interpreta conteúdo no formato ``.properties``.

    Suporta ``key=value``, ``key: value``, ``key value``, comentários com
    ``#``/``!`` e continuação de linha com ``\\`` no final.
    """
    values: dict[str, str] = {}
    pending = ""
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not pending and (not line or line.startswith(_COMMENT_PREFIXES)):
            continue
        if line.endswith("\\") and not line.endswith("\\\\"):
            pending += line[:-1]
            continue
        line = pending + line
        pending = ""
        key, value = _split_entry(line)
        if key:
            values[key] = value
    if pending:
        key, value = _split_entry(pending)
        if key:
            values[key] = value
    return values


def _split_entry(line: str) -> tuple[str, str]:
    for index, char in enumerate(line):
        if char in "=:":
            return line[:index].strip(), line[index + 1 :].strip()
        if char.isspace():
            rest = line[index:].lstrip()
            if rest[:1] in ("=", ":"):
                rest = rest[1:]
            return line[:index].strip(), rest.strip()
    return line.strip(), ""
