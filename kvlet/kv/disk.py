"""Disk-backed KV store using diskcache."""

from typing import Iterable, Mapping, cast

from .base import KVStore

ONE_GB = 1024 * 1024 * 1024


class Disk(KVStore):
    """KV store backed by diskcache (SQLite + mmap).

    Eviction is disabled: repository records are never culled, whatever
    ``size_limit`` says.
    """

    def __init__(self, directory: str, size_limit: int = ONE_GB) -> None:
        from diskcache import Cache as DiskCache

        self.directory = directory
        self.store = DiskCache(
            directory, size_limit=size_limit, eviction_policy="none"
        )

    def get(self, key: str) -> bytes | None:
        return cast(bytes | None, self.store.get(key))

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        self.store[key] = value

    def get_many(self, *args: str) -> Mapping[str, bytes]:
        return {k: v for k in args if (v := self.get(k)) is not None}

    def set_many(self, **kwargs: bytes) -> None:
        for key, value in kwargs.items():
            if not isinstance(value, bytes):
                raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
        with self.store.transact():
            for key, value in kwargs.items():
                self.store[key] = value

    def keys(self) -> Iterable[str]:
        return [str(key) for key in self.store.iterkeys()]

    def __contains__(self, key: str) -> bool:
        return key in self.store

    def remove(self, key: str) -> None:
        self.store.delete(key)

    def remove_many(self, *keys: str) -> None:
        with self.store.transact():
            for key in keys:
                self.store.delete(key, retry=False)

    def close(self) -> None:
        """Release the underlying SQLite connection."""
        self.store.close()
