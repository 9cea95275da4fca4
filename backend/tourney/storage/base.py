import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TypeVar

from tourney.utils.errors import StorageError

T = TypeVar("T")


class ObjectStore(ABC):
    """
    Key-value blob store holding replay files.

    Keys are hierarchical strings (``temp/<user>/<match>/<file>``, ``matches/<match>/<file>``).
    There is no atomic rename: moving an object is a copy followed by a separate delete.
    Every call is bounded by ``timeout_seconds`` and any failure, a timeout included,
    surfaces as a ``StorageError``.
    """

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds

    async def upload(self, key: str, data: bytes, metadata: dict[str, str] | None = None) -> str:
        await self._run("upload", key, self._upload(key, data, metadata or {}))
        return key

    async def download(self, key: str) -> bytes:
        return await self._run("download", key, self._download(key))

    async def copy(self, source_key: str, destination_key: str) -> None:
        await self._run(
            "copy",
            source_key,
            self._copy(source_key, destination_key),
            destination_key=destination_key,
        )

    async def delete(self, key: str) -> None:
        await self._run("delete", key, self._delete(key))

    async def exists(self, key: str) -> bool:
        return await self._run("exists", key, self._exists(key))

    async def list_keys(self, prefix: str = "") -> list[str]:
        return await self._run("list", prefix, self._list_keys(prefix))

    async def _run(self, operation: str, key: str, coroutine: Awaitable[T], **context: str) -> T:
        task = asyncio.ensure_future(coroutine)
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.timeout_seconds)
        except StorageError:
            raise
        except TimeoutError as exc:
            # Work running in a thread can't be cancelled. Let it finish before reporting, so a
            # compensating delete issued by the caller runs after the write, not before it.
            await asyncio.gather(task, return_exceptions=True)
            raise StorageError(
                f"Object store {operation} timed out after {self.timeout_seconds}s",
                key=key,
                **context,
            ) from exc
        except Exception as exc:
            raise StorageError(
                f"Object store {operation} failed: {exc}", key=key, **context
            ) from exc

    @abstractmethod
    async def _upload(self, key: str, data: bytes, metadata: dict[str, str]) -> None: ...

    @abstractmethod
    async def _download(self, key: str) -> bytes: ...

    @abstractmethod
    async def _copy(self, source_key: str, destination_key: str) -> None: ...

    @abstractmethod
    async def _delete(self, key: str) -> None: ...

    @abstractmethod
    async def _exists(self, key: str) -> bool: ...

    @abstractmethod
    async def _list_keys(self, prefix: str) -> list[str]: ...
