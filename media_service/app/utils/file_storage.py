"""
Local file storage for uploaded images.

Files are addressed by a storage key relative to the storage root. Blocking
filesystem calls run in a worker thread so they never stall the event loop.
"""

import asyncio
from pathlib import Path
from typing import Optional

from .logging import setup_media_logging as setup_logging

logger = setup_logging("media_service.storage")


class MediaStorage:
    def __init__(self, root_dir: str):
        self.root = Path(root_dir)

    def path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Storage key escapes storage root: {key!r}")
        return path

    def _write(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def _remove(self, key: str) -> bool:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            return False
        return True

    async def save(self, key: str, data: bytes) -> None:
        await asyncio.to_thread(self._write, key, data)

    async def remove(self, key: str) -> bool:
        """Delete the stored file; a missing file is a no-op"""
        try:
            removed = await asyncio.to_thread(self._remove, key)
        except OSError as e:
            logger.warning(
                "Failed to remove stored media file",
                extra={"file_path": key, "error": str(e), "operation": "remove_file"},
            )
            return False

        if not removed:
            logger.debug(
                "Stored media file already absent",
                extra={"file_path": key, "operation": "remove_file"},
            )
        return removed

    def resolve(self, key: str) -> Optional[Path]:
        """Absolute path of an existing stored file, else None"""
        try:
            path = self.path_for(key)
        except ValueError:
            return None
        return path if path.is_file() else None
