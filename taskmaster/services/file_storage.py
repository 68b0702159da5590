# taskmaster/services/file_storage.py
"""
Локальное файловое хранилище для вложений.
Файл пишется потоково, блоками по 1MB; превышение лимита прерывает запись и удаляет файл.
"""
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Tuple
import logging
import uuid

from taskmaster.core.exceptions import ValidationError
from taskmaster.core.settings import settings

logger = logging.getLogger("TaskMaster.Storage")

CHUNK_SIZE = 1024 * 1024


class LocalFileStorage:
    def __init__(self, root: str, max_size: int, allowed_types: Iterable[str]):
        self.root = Path(root)
        self.max_size = max_size
        self.allowed_types = set(allowed_types)

    @classmethod
    def from_settings(cls) -> "LocalFileStorage":
        return cls(settings.UPLOAD_DIR, settings.MAX_UPLOAD_SIZE, settings.ALLOWED_UPLOAD_TYPES)

    def check_type(self, mime_type: Optional[str]) -> None:
        if mime_type not in self.allowed_types:
            raise ValidationError(
                "File type not allowed",
                errors=[{"field": "file", "message": f"MIME type not allowed: {mime_type}"}],
            )

    def save(self, source: BinaryIO, original_name: str) -> Tuple[str, str, int]:
        """
        Сохраняет поток под уникальным именем. Возвращает (filename, path, size).
        """
        self.root.mkdir(parents=True, exist_ok=True)
        filename = f"{uuid.uuid4()}{Path(original_name or '').suffix.lower()}"
        path = self.root / filename
        size = 0
        try:
            with open(path, "wb") as out:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        raise ValidationError(
                            "File too large",
                            errors=[{"field": "file", "message": f"Maximum size is {self.max_size} bytes"}],
                        )
                    out.write(chunk)
        except Exception:
            self.delete(str(path))
            raise
        logger.info(f"Stored {original_name} as {filename} ({size} bytes)")
        return filename, str(path), size

    def delete(self, path: str) -> bool:
        """Удаляет файл; отсутствие файла не ошибка."""
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Could not delete stored file {path}: {e}")
            return False
        return True

    def exists(self, path: str) -> bool:
        return Path(path).is_file()
