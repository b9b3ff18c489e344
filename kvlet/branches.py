"""Branch table and HEAD."""

import json
import logging
from dataclasses import dataclass

from .errors import (
    BranchAlreadyExists,
    BranchNotFound,
    CannotRemoveCurrentBranch,
    CorruptRecord,
    NotInitialized,
)
from .kv.base import KVStore

BRANCH_KEY = "__branch__%s"
HEAD_KEY = "__head__"
RECORD_VERSION = 1
DEFAULT_BRANCH = "master"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Branch:
    """A named pointer to a commit."""

    name: str
    commit: str


def _dumps(record: dict) -> bytes:
    return json.dumps(record, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _loads(raw: bytes, kind: str) -> dict:
    try:
        record = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptRecord(f"{kind}: {e}") from e
    if not isinstance(record, dict) or record.get("v") != RECORD_VERSION:
        raise CorruptRecord(f"{kind}: unsupported record version")
    return record


def encode_branch(branch: Branch) -> bytes:
    return _dumps({"v": RECORD_VERSION, "name": branch.name, "commit": branch.commit})


def decode_branch(raw: bytes) -> Branch:
    record = _loads(raw, "branch")
    try:
        return Branch(name=record["name"], commit=record["commit"])
    except KeyError as e:
        raise CorruptRecord(f"branch: missing field {e}") from e


def encode_head(branch_name: str) -> bytes:
    return _dumps({"v": RECORD_VERSION, "branch": branch_name})


def decode_head(raw: bytes) -> str:
    record = _loads(raw, "HEAD")
    if "branch" not in record:
        raise CorruptRecord("HEAD: missing field 'branch'")
    return record["branch"]


class BranchTable:
    """Mutable branch pointers plus HEAD, which names the current branch.

    HEAD never holds a commit id. Switching branches rewrites HEAD only;
    branch pointers move through ``advance()``.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- HEAD --

    @property
    def initialized(self) -> bool:
        return HEAD_KEY in self.store

    @property
    def head(self) -> str:
        """Name of the checked-out branch."""
        raw = self.store.get(HEAD_KEY)
        if raw is None:
            raise NotInitialized()
        return decode_head(raw)

    def switch(self, name: str) -> None:
        """Point HEAD at branch ``name``."""
        if not self.exists(name):
            raise BranchNotFound(name)
        self.store.set(HEAD_KEY, encode_head(name))
        logger.debug("HEAD -> %s", name)

    def current(self) -> tuple[str, str]:
        """The current branch name and the commit it points at."""
        name = self.head
        return name, self.get(name)

    # -- Branch pointers --

    def get(self, name: str) -> str:
        raw = self.store.get(BRANCH_KEY % name)
        if raw is None:
            raise BranchNotFound(name)
        return decode_branch(raw).commit

    def exists(self, name: str) -> bool:
        return BRANCH_KEY % name in self.store

    def names(self) -> list[str]:
        """All branch names, sorted."""
        return self.store.scan(BRANCH_KEY % "")

    def create(self, name: str, commit_id: str) -> None:
        if self.exists(name):
            raise BranchAlreadyExists(name)
        self.store.set(BRANCH_KEY % name, encode_branch(Branch(name, commit_id)))
        logger.debug("created branch %s at %s", name, commit_id)

    def advance(self, name: str, commit_id: str) -> None:
        """Overwrite branch ``name`` to point at ``commit_id``."""
        if not self.exists(name):
            raise BranchNotFound(name)
        self.store.set(BRANCH_KEY % name, encode_branch(Branch(name, commit_id)))
        logger.debug("branch %s -> %s", name, commit_id)

    def delete(self, name: str) -> None:
        if name == self.head:
            raise CannotRemoveCurrentBranch(name)
        if not self.exists(name):
            raise BranchNotFound(name)
        self.store.remove(BRANCH_KEY % name)
        logger.debug("deleted branch %s", name)

    def initialize(self, root_commit: str, name: str = DEFAULT_BRANCH) -> None:
        """Create the first branch at ``root_commit`` and check it out."""
        self.store.set_many(
            **{
                BRANCH_KEY % name: encode_branch(Branch(name, root_commit)),
                HEAD_KEY: encode_head(name),
            }
        )
