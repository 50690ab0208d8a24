"""Layout de arquivos do servidor em ``data.folder``."""

from app.infra.files.file_manager import (
    REPORTING_FOLDER_NAME,
    USER_FILE_EXTENSION,
    FileManager,
    get_reporting_folder,
)

__all__ = [
    "REPORTING_FOLDER_NAME",
    "USER_FILE_EXTENSION",
    "FileManager",
    "get_reporting_folder",
]
