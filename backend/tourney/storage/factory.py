from functools import cache

from tourney.config import ObjectStoreBackend, config
from tourney.storage.base import ObjectStore
from tourney.storage.local import LocalObjectStore
from tourney.storage.s3 import S3ObjectStore


@cache
def get_object_store() -> ObjectStore:
    match config.object_store_backend:
        case ObjectStoreBackend.S3:
            return S3ObjectStore.from_config(config)
        case ObjectStoreBackend.LOCAL:
            return LocalObjectStore(config.local_storage_path, config.object_store_timeout_seconds)
        case other:
            raise NotImplementedError(f"No object store implementation for {other}")
