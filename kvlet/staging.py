"""Staging index: pending additions and removals for the next commit."""

from .kv.base import KVStore

STAGED_ADD_KEY = "__staged_add__%s"
STAGED_REMOVE_KEY = "__staged_remove__%s"


class StagingIndex:
    """Pending per-path changes relative to the current commit.

    Staged additions hold the content to commit; staged removals hold the
    digest the path had in the current commit (a tombstone). A path is in
    at most one of the two sets. The index lives in the KV store so it
    survives between invocations until a commit, checkout, reset or merge
    clears it.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- Read operations --

    def additions(self) -> dict[str, bytes]:
        """Staged-for-addition paths mapped to their pending content."""
        paths = self.added_paths()
        found = self.store.get_many(*(STAGED_ADD_KEY % p for p in paths))
        return {p: found[STAGED_ADD_KEY % p] for p in paths}

    def removals(self) -> dict[str, str]:
        """Staged-for-removal paths mapped to their tombstone digests."""
        paths = self.removed_paths()
        found = self.store.get_many(*(STAGED_REMOVE_KEY % p for p in paths))
        return {p: found[STAGED_REMOVE_KEY % p].decode("ascii") for p in paths}

    def added_paths(self) -> list[str]:
        return self.store.scan(STAGED_ADD_KEY % "")

    def removed_paths(self) -> list[str]:
        return self.store.scan(STAGED_REMOVE_KEY % "")

    def is_added(self, path: str) -> bool:
        return STAGED_ADD_KEY % path in self.store

    def is_removed(self, path: str) -> bool:
        return STAGED_REMOVE_KEY % path in self.store

    @property
    def has_changes(self) -> bool:
        """Whether anything is staged."""
        return bool(self.added_paths() or self.removed_paths())

    # -- Write operations --

    def add(self, path: str, content: bytes) -> None:
        """Stage ``content`` for ``path``, replacing any staged removal."""
        self.store.remove(STAGED_REMOVE_KEY % path)
        self.store.set(STAGED_ADD_KEY % path, content)

    def remove(self, path: str, blob: str) -> None:
        """Stage a removal of ``path`` whose committed digest is ``blob``."""
        self.store.remove(STAGED_ADD_KEY % path)
        self.store.set(STAGED_REMOVE_KEY % path, blob.encode("ascii"))

    def unstage(self, path: str) -> None:
        """Drop any pending change for ``path``."""
        self.store.remove_many(STAGED_ADD_KEY % path, STAGED_REMOVE_KEY % path)

    def discard_addition(self, path: str) -> None:
        self.store.remove(STAGED_ADD_KEY % path)

    def clear(self) -> None:
        """Discard all staged changes."""
        keys = [STAGED_ADD_KEY % p for p in self.added_paths()]
        keys += [STAGED_REMOVE_KEY % p for p in self.removed_paths()]
        if keys:
            self.store.remove_many(*keys)
