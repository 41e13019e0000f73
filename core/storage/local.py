"""Local file storage for uploaded CVs."""

import uuid
from pathlib import Path
from typing import Optional
import logging

from core.utils.validators import file_extension

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Stores files under a base directory.

    Filenames passed to ``delete`` and ``get_path`` are paths
    relative to the base directory, as returned by ``save``. All calls
    block; async callers run them in a threadpool.
    """

    def __init__(self, base_path: str = "./storage"):
        """
        Initialize local storage.

        Args:
            base_path: Base directory for file storage
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_path(self, filename: str) -> Path:
        """
        Absolute path for a stored file.

        Raises:
            ValueError: If ``filename`` would resolve outside the base directory
        """
        base = self.base_path.resolve()
        file_path = (base / filename).resolve()
        if base != file_path and base not in file_path.parents:
            raise ValueError(f"Path escapes storage root: {filename}")
        return file_path

    def save(self, content: bytes, filename: str) -> str:
        """
        Write ``content`` under the base directory.

        Returns:
            Path of the saved file relative to the base directory
        """
        file_path = self.get_path(filename)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)

        logger.info(f"Saved file to {file_path}")
        return filename

    def delete(self, filename: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if a file was removed, False if none existed
        """
        file_path = self.get_path(filename)
        if not file_path.is_file():
            return False

        file_path.unlink()
        logger.info(f"Deleted file: {file_path}")
        return True


def generate_cv_filename(original_filename: Optional[str]) -> str:
    """
    Unique name for an uploaded CV keeping its extension.

    ``resume final.PDF`` becomes ``<uuid4 hex>.pdf``.
    """
    ext = file_extension(original_filename)
    name = uuid.uuid4().hex
    return f"{name}.{ext}" if ext else name
