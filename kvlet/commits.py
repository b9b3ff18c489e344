"""Commit graph: immutable commit records forming a DAG."""

import json
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable

from .errors import CommitNotFound, CorruptRecord, EmptyMessage
from .kv.base import KVStore
from .objects import digest

COMMIT_KEY = "__commit__%s"
RECORD_VERSION = 1
MIN_SHORT_ID = 6
INITIAL_MESSAGE = "initial commit"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Commit:
    """A single commit record.

    ``snapshot`` maps each tracked path to the digest of its blob.
    ``parent`` is None only for the root commit; ``merge_parent`` is set
    only on merge commits.
    """

    message: str
    timestamp: int
    parent: str | None = None
    merge_parent: str | None = None
    snapshot: dict[str, str] = field(default_factory=dict)

    @property
    def parents(self) -> tuple[str, ...]:
        return tuple(p for p in (self.parent, self.merge_parent) if p is not None)

    @property
    def is_merge(self) -> bool:
        return self.merge_parent is not None


def encode_commit(commit: Commit) -> bytes:
    """Canonical JSON encoding; the commit id is the digest of these bytes."""
    record = {
        "v": RECORD_VERSION,
        "message": commit.message,
        "timestamp": commit.timestamp,
        "parent": commit.parent,
        "merge_parent": commit.merge_parent,
        "snapshot": commit.snapshot,
    }
    return json.dumps(record, sort_keys=True, separators=(",", ":")).encode("utf-8")


def decode_commit(raw: bytes) -> Commit:
    try:
        record = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptRecord(f"commit: {e}") from e
    if not isinstance(record, dict) or record.get("v") != RECORD_VERSION:
        raise CorruptRecord("commit: unsupported record version")
    try:
        return Commit(
            message=record["message"],
            timestamp=record["timestamp"],
            parent=record["parent"],
            merge_parent=record["merge_parent"],
            snapshot=dict(record["snapshot"]),
        )
    except KeyError as e:
        raise CorruptRecord(f"commit: missing field {e}") from e


class CommitGraph:
    """Commit records keyed by the digest of their encoded form."""

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- Write operations --

    def create(
        self,
        message: str,
        parent: str,
        snapshot: dict[str, str],
        *,
        merge_parent: str | None = None,
        timestamp: int | None = None,
    ) -> str:
        """Store a new commit and return its id.

        Raises:
            EmptyMessage: If ``message`` is blank.
            CommitNotFound: If a parent id is not stored.
        """
        if not message.strip():
            raise EmptyMessage()
        for p in (parent, merge_parent):
            if p is not None and not self.exists(p):
                raise CommitNotFound(p)
        commit = Commit(
            message=message,
            timestamp=int(time.time()) if timestamp is None else timestamp,
            parent=parent,
            merge_parent=merge_parent,
            snapshot=dict(snapshot),
        )
        return self._write(commit)

    def create_root(self) -> str:
        """Store the parentless, empty root commit at the epoch."""
        return self._write(Commit(message=INITIAL_MESSAGE, timestamp=0))

    def _write(self, commit: Commit) -> str:
        raw = encode_commit(commit)
        commit_id = digest(raw)
        self.store.set(COMMIT_KEY % commit_id, raw)
        logger.debug(
            "created commit %s (%d paths, parents=%s)",
            commit_id,
            len(commit.snapshot),
            commit.parents,
        )
        return commit_id

    # -- Read operations --

    def get(self, commit_id: str) -> Commit:
        raw = self.store.get(COMMIT_KEY % commit_id)
        if raw is None:
            raise CommitNotFound(commit_id)
        return decode_commit(raw)

    def exists(self, commit_id: str) -> bool:
        return COMMIT_KEY % commit_id in self.store

    def ids(self) -> list[str]:
        """All stored commit ids, sorted."""
        return self.store.scan(COMMIT_KEY % "")

    def resolve(self, prefix: str) -> str:
        """Resolve a full or abbreviated commit id.

        Prefixes shorter than ``MIN_SHORT_ID`` never match. The first id in
        sorted order that starts with ``prefix`` wins; a second match is
        not looked for.
        """
        if self.exists(prefix):
            return prefix
        if len(prefix) < MIN_SHORT_ID:
            raise CommitNotFound(prefix)
        for commit_id in self.ids():
            if commit_id.startswith(prefix):
                return commit_id
        raise CommitNotFound(prefix)

    def find(self, message: str) -> list[str]:
        """Ids of all commits whose message equals ``message`` exactly."""
        return [c for c in self.ids() if self.get(c).message == message]

    # -- Traversal --

    def history(self, commit_id: str) -> Iterable[str]:
        """Yield the first-parent chain from ``commit_id`` to the root."""
        current: str | None = commit_id
        while current is not None:
            yield current
            current = self.get(current).parent

    def ancestors(self, commit_id: str) -> list[str]:
        """BFS over parent and merge-parent edges, ``commit_id`` first.

        Each commit appears once, in visitation order.
        """
        visited: set[str] = {commit_id}
        order: list[str] = []
        queue: deque[str] = deque([commit_id])
        while queue:
            current = queue.popleft()
            order.append(current)
            for p in self.get(current).parents:
                if p not in visited:
                    visited.add(p)
                    queue.append(p)
        return order

    def merge_base(self, commit_a: str, commit_b: str) -> str | None:
        """First commit in ``commit_a``'s BFS order that ``commit_b`` reaches.

        Not a true lowest common ancestor when several incomparable common
        ancestors exist. Returns None for unrelated histories.
        """
        reachable_b = set(self.ancestors(commit_b))
        for commit_id in self.ancestors(commit_a):
            if commit_id in reachable_b:
                return commit_id
        return None
