"""FileManager: persistência de usuários em arquivos JSON.

Layout em disco::

    <data.folder>/
        users/<email>.<app_name>.user   # um arquivo por usuário
        data/                           # reporting (ver get_reporting_folder)

Escritas são atômicas (arquivo temporário + rename).
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from app.domain.user import User, UserKey

logger = logging.getLogger(__name__)

USER_FILE_EXTENSION = ".user"
USERS_FOLDER_NAME = "users"
REPORTING_FOLDER_NAME = "data"


def get_reporting_folder(data_folder: str | Path) -> Path:
    """Pasta de reporting derivada da pasta de dados."""
    return Path(data_folder) / REPORTING_FOLDER_NAME


class FileManager:
    """Lê e grava usuários no layout de ``data.folder``.

    Args:
        data_folder: Pasta raiz; criada se não existir.
    """

    __slots__ = ("_data_dir", "_users_dir")

    def __init__(self, data_folder: str | Path) -> None:
        self._data_dir = Path(data_folder)
        self._users_dir = self._data_dir / USERS_FOLDER_NAME
        self._users_dir.mkdir(parents=True, exist_ok=True)
        logger.info("file_manager_created", extra={"data_folder": str(self._data_dir)})

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def users_dir(self) -> Path:
        return self._users_dir

    def generate_file_name(self, key: UserKey) -> Path:
        return self._users_dir / f"{key.email}.{key.app_name}{USER_FILE_EXTENSION}"

    def overwrite_user_file(self, user: User) -> Path:
        """Grava o usuário de forma atômica."""
        target = self.generate_file_name(user.key)
        fd, tmp_name = tempfile.mkstemp(dir=self._users_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(user.model_dump_json())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return target

    def delete(self, key: UserKey) -> bool:
        """Remove o arquivo do usuário; False se não existia."""
        target = self.generate_file_name(key)
        if not target.exists():
            return False
        target.unlink()
        return True

    def read_user(self, path: Path) -> User:
        return User.model_validate_json(path.read_text(encoding="utf-8"))

    def deserialize_users(self) -> dict[UserKey, User]:
        """Carrega todos os arquivos ``.user``.

        Arquivos corrompidos são ignorados com warning; falha de leitura
        da pasta em si propaga (``OSError``).
        """
        users: dict[UserKey, User] = {}
        skipped = 0
        for path in sorted(self._users_dir.glob(f"*{USER_FILE_EXTENSION}")):
            try:
                user = self.read_user(path)
            except (ValidationError, ValueError) as exc:
                skipped += 1
                logger.warning(
                    "user_file_invalid",
                    extra={"error_type": type(exc).__name__},
                )
                continue
            users[user.key] = user
        logger.info(
            "users_deserialized",
            extra={"users_count": len(users), "skipped_count": skipped},
        )
        return users
