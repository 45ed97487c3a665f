"""Host persistence capabilities: whole-blob read and write."""

import asyncio
import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger


def _dump(data: dict[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, indent=4, ensure_ascii=False) + "\n"


class JsonFileBlobStore:
    """Keep the data blob in a single JSON file.

    - Do not rewrite the file if contents are the same.
    - Replace the file atomically, so a failed write never leaves half a blob.
    """

    def __init__(self, path: str | Path, *, dry_run: bool = False) -> None:
        self.path = Path(path).expanduser().resolve()
        self.dry_run = dry_run
        logger.debug("Blob store ready, path {!r}, dry_run {!r}", str(self.path), dry_run)

    async def read_blob(self) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read)

    async def write_blob(self, data: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, data)

    def _read(self) -> dict[str, Any] | None:
        """Read the blob.

        Returns:
            Blob contents if the file is found, None if it is not found.
            Raises on all other errors.
        """
        try:
            contents = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        rj = json.loads(contents)
        # If we read None, it'll be ambiguous vs "file not found".
        if rj is None:
            msg = f"Blob file {str(self.path)!r} contains a null document"
            raise ValueError(msg)
        if not isinstance(rj, dict):
            msg = f"Blob file {str(self.path)!r} does not contain an object"
            raise ValueError(msg)
        return rj

    def _write(self, data: dict[str, Any]) -> None:
        contents = _dump(data)
        action = "create"
        try:
            if self.path.read_text(encoding="utf-8") == contents:
                logger.debug("Blob unchanged, not writing {!r}", str(self.path))
                return
            action = "update"
        except (FileNotFoundError, UnicodeDecodeError):
            pass

        if self.dry_run:
            logger.info("dry-run: would {} {!r}", action, str(self.path))
            return

        logger.debug("Writing ({}) {!r}", action, str(self.path))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".blob-", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(contents)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryBlobStore:
    """Keep the data blob in memory. Reads and writes are deep copies."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = copy.deepcopy(data)

    async def read_blob(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._data)

    async def write_blob(self, data: dict[str, Any]) -> None:
        self._data = copy.deepcopy(data)
