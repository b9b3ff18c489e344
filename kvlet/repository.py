"""Repository: the context object every operation runs against."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from . import checkout as _checkout
from . import merge as _merge
from .branches import DEFAULT_BRANCH, BranchTable
from .commits import Commit, CommitGraph
from .errors import (
    AlreadyInitialized,
    EmptyMessage,
    NoReasonToRemove,
    NotInitialized,
    NothingToCommit,
)
from .kv.base import KVStore
from .objects import ObjectStore, digest
from .staging import StagingIndex
from .worktree import WorkingTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    """One commit as shown by ``log`` and ``global-log``."""

    commit_id: str
    commit: Commit

    @property
    def date(self) -> str:
        when = datetime.fromtimestamp(self.commit.timestamp).astimezone()
        return f"{when:%a %b} {when.day} {when:%H:%M:%S %Y %z}"

    def render(self) -> str:
        lines = ["===", f"commit {self.commit_id}"]
        if self.commit.is_merge:
            lines.append(
                f"Merge: {self.commit.parent[:7]} {self.commit.merge_parent[:7]}"
            )
        lines.append(f"Date: {self.date}")
        lines.append(self.commit.message)
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class Status:
    """Snapshot of branches, the staging index and working-tree drift."""

    current_branch: str
    branches: list[str]
    staged: list[str]
    removed: list[str]
    modified: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)

    def render(self) -> str:
        sections = [
            ("Branches", [("*" + b) if b == self.current_branch else b
                          for b in self.branches]),
            ("Staged Files", self.staged),
            ("Removed Files", self.removed),
            ("Modifications Not Staged For Commit", self.modified),
            ("Untracked Files", self.untracked),
        ]
        return "\n".join(
            "\n".join([f"=== {title} ===", *items]) + "\n" for title, items in sections
        )


class Repository:
    """Owns the object store, commit graph, branch table and staging index.

    All state lives in one ``KVStore``; working files are read and written
    through a ``WorkingTree``. Use ``Repository.init()`` to create a new
    repository or ``Repository.open()`` to attach to an existing one.
    """

    def __init__(self, store: KVStore, worktree: WorkingTree) -> None:
        self.store = store
        self.worktree = worktree
        self.objects = ObjectStore(store)
        self.commits = CommitGraph(store)
        self.branches = BranchTable(store)
        self.index = StagingIndex(store)

    @classmethod
    def init(
        cls, store: KVStore, worktree: WorkingTree, *, branch: str = DEFAULT_BRANCH
    ) -> "Repository":
        """Create the root commit and the first branch.

        Raises AlreadyInitialized if the store already holds a repository.
        """
        repo = cls(store, worktree)
        if repo.branches.initialized:
            raise AlreadyInitialized()
        root = repo.commits.create_root()
        repo.branches.initialize(root, branch)
        logger.debug("initialized repository on %s at %s", branch, root)
        return repo

    @classmethod
    def open(cls, store: KVStore, worktree: WorkingTree) -> "Repository":
        """Attach to an existing repository. Raises NotInitialized if none."""
        repo = cls(store, worktree)
        if not repo.branches.initialized:
            raise NotInitialized()
        return repo

    # -- Current state --

    @property
    def current_branch(self) -> str:
        return self.branches.head

    def head_id(self) -> str:
        """Id of the commit the current branch points at."""
        return self.branches.current()[1]

    def head_commit(self) -> Commit:
        return self.commits.get(self.head_id())

    # -- Staging / commit --

    def add(self, path: str) -> bool:
        """Stage the working-tree content of ``path``.

        If it matches the current commit, any pending change for ``path``
        is dropped instead. Returns whether something is now staged.
        """
        content = self.worktree.read(path)
        if self.head_commit().snapshot.get(path) == digest(content):
            self.index.unstage(path)
            return False
        self.index.add(path, content)
        return True

    def remove(self, path: str) -> None:
        """Unstage ``path`` and, if tracked, delete it and stage its removal."""
        snapshot = self.head_commit().snapshot
        staged = self.index.is_added(path)
        if not staged and path not in snapshot:
            raise NoReasonToRemove(path)
        if staged:
            self.index.discard_addition(path)
        if path in snapshot:
            self.worktree.delete(path)
            self.index.remove(path, snapshot[path])

    def commit(self, message: str) -> str:
        """Commit the staging index on the current branch. Returns the id."""
        return self.commit_index(message)

    def commit_index(self, message: str, *, merge_parent: str | None = None) -> str:
        """Turn the staging index into a commit and advance the branch.

        The index is cleared only once the commit and branch pointer are
        stored.
        """
        if not self.index.has_changes:
            raise NothingToCommit()
        if not message.strip():
            raise EmptyMessage()
        branch, parent = self.branches.current()
        snapshot = dict(self.commits.get(parent).snapshot)
        for path, content in self.index.additions().items():
            snapshot[path] = self.objects.put(content)
        for path in self.index.removed_paths():
            snapshot.pop(path, None)
        commit_id = self.commits.create(
            message, parent, snapshot, merge_parent=merge_parent
        )
        self.branches.advance(branch, commit_id)
        self.index.clear()
        return commit_id

    # -- Checkout / reset / merge --

    def checkout(self, branch: str) -> None:
        _checkout.checkout_branch(self, branch)

    def checkout_file(self, path: str, commit: str | None = None) -> None:
        _checkout.checkout_file(self, path, commit)

    def reset(self, commit: str) -> str:
        return _checkout.reset(self, commit)

    def merge(self, branch: str) -> _merge.MergeResult:
        return _merge.merge(self, branch)

    # -- Branches --

    def branch(self, name: str) -> None:
        """Create branch ``name`` at the current commit."""
        self.branches.create(name, self.head_id())

    def remove_branch(self, name: str) -> None:
        self.branches.delete(name)

    # -- History / inspection --

    def log(self) -> list[LogEntry]:
        """First-parent history of the current branch, newest first."""
        history = self.commits.history(self.head_id())
        return [LogEntry(c, self.commits.get(c)) for c in history]

    def global_log(self) -> list[LogEntry]:
        """Every commit ever made, in id order."""
        return [LogEntry(c, self.commits.get(c)) for c in self.commits.ids()]

    def find(self, message: str) -> list[str]:
        return self.commits.find(message)

    def status(self) -> Status:
        snapshot = self.head_commit().snapshot
        additions = self.index.additions()
        removed = self.index.removed_paths()

        modified: list[str] = []
        for path in sorted(set(snapshot) | set(additions)):
            if path in additions:
                expected = digest(additions[path])
            elif path not in removed:
                expected = snapshot[path]
            else:
                continue
            if not self.worktree.exists(path):
                modified.append(f"{path} (deleted)")
            elif digest(self.worktree.read(path)) != expected:
                modified.append(f"{path} (modified)")

        untracked = [
            path
            for path in self.worktree.list_files()
            if path in removed or (path not in additions and path not in snapshot)
        ]
        return Status(
            current_branch=self.current_branch,
            branches=self.branches.names(),
            staged=sorted(additions),
            removed=removed,
            modified=modified,
            untracked=untracked,
        )
