"""Object store: content-addressed, deduplicated blob storage."""

import hashlib
import logging

from .errors import ObjectNotFound
from .kv.base import KVStore

BLOB_KEY = "__blob__%s"

logger = logging.getLogger(__name__)


def digest(data: bytes) -> str:
    """SHA-1 of ``data`` as 40 lowercase hex characters."""
    return hashlib.sha1(data).hexdigest()


class ObjectStore:
    """Blobs keyed by the digest of their content.

    Blobs are immutable and never deleted. Storing the same content twice
    returns the same digest and leaves a single stored copy.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    def put(self, data: bytes) -> str:
        """Store ``data`` if unseen and return its digest."""
        key = digest(data)
        if BLOB_KEY % key not in self.store:
            self.store.set(BLOB_KEY % key, data)
            logger.debug("stored blob %s (%d bytes)", key, len(data))
        return key

    def get(self, key: str) -> bytes:
        data = self.store.get(BLOB_KEY % key)
        if data is None:
            raise ObjectNotFound(key)
        return data

    def exists(self, key: str) -> bool:
        return BLOB_KEY % key in self.store

    def __contains__(self, key: str) -> bool:
        return self.exists(key)

    def digests(self) -> list[str]:
        """All stored blob digests, sorted."""
        return self.store.scan(BLOB_KEY % "")
