import asyncio
import json
import os
from pathlib import Path

import aiofiles
import aiofiles.os

from tourney.storage.base import ObjectStore
from tourney.utils.errors import StorageError

_METADATA_DIR = ".metadata"


class LocalObjectStore(ObjectStore):
    """
    Object store on the local filesystem, used in development and CI.

    Objects live at ``<root>/<key>``; their metadata is kept as JSON under ``<root>/.metadata``.
    """

    def __init__(self, root: str | Path, timeout_seconds: float) -> None:
        super().__init__(timeout_seconds)
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        parts = key.split("/")
        if key == "" or key.startswith("/") or any(part in {"", ".", ".."} for part in parts):
            raise StorageError("Invalid object key", key=key)
        if parts[0] == _METADATA_DIR:
            raise StorageError("Object key uses a reserved prefix", key=key)
        return self.root.joinpath(*parts)

    def _metadata_path(self, key: str) -> Path:
        return self.root / _METADATA_DIR / f"{key}.json"

    async def _write(self, path: Path, data: bytes) -> None:
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)

    async def _upload(self, key: str, data: bytes, metadata: dict[str, str]) -> None:
        await self._write(self._path(key), data)
        await self._write(self._metadata_path(key), json.dumps(metadata).encode("utf-8"))

    async def _download(self, key: str) -> bytes:
        async with aiofiles.open(self._path(key), "rb") as f:
            return await f.read()

    async def _copy(self, source_key: str, destination_key: str) -> None:
        await self._write(self._path(destination_key), await self._download(source_key))
        if await aiofiles.os.path.exists(self._metadata_path(source_key)):
            async with aiofiles.open(self._metadata_path(source_key), "rb") as f:
                metadata = await f.read()
            await self._write(self._metadata_path(destination_key), metadata)

    async def _delete(self, key: str) -> None:
        for path in (self._path(key), self._metadata_path(key)):
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                pass

    async def _exists(self, key: str) -> bool:
        return await aiofiles.os.path.isfile(self._path(key))

    async def _list_keys(self, prefix: str) -> list[str]:
        def collect_keys() -> list[str]:
            keys = []
            for directory, dirnames, filenames in os.walk(self.root):
                if Path(directory) == self.root and _METADATA_DIR in dirnames:
                    dirnames.remove(_METADATA_DIR)
                for filename in filenames:
                    key = (Path(directory) / filename).relative_to(self.root).as_posix()
                    if key.startswith(prefix):
                        keys.append(key)
            return sorted(keys)

        return await asyncio.to_thread(collect_keys)
