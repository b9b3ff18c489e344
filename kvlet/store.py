"""Repository factory function."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from .branches import DEFAULT_BRANCH
from .errors import NotInitialized
from .kv.base import KVStore
from .kv.memory import Memory
from .repository import Repository
from .worktree import Directory, MemoryTree, WorkingTree

REPO_DIR = ".kvlet"


def repository(
    kind: Literal["memory", "disk"] = "memory",
    *,
    path: str | os.PathLike | None = None,
    work_tree: WorkingTree | str | os.PathLike | None = None,
    branch: str = DEFAULT_BRANCH,
    size_limit: int = 0,
    init: bool = False,
) -> Repository:
    """Create or open a Repository with sensible defaults.

    Args:
        kind: ``"memory"`` (default) or ``"disk"``.
        path: Required when ``kind="disk"``. Directory holding the
            repository database (conventionally ``<work tree>/.kvlet``).
        work_tree: A ``WorkingTree``, or a directory for a ``Directory``
            tree. Defaults to the parent of ``path`` for disk
            repositories and an empty ``MemoryTree`` otherwise.
        branch: Name of the first branch when initializing.
        size_limit: Disk cache size hint in bytes (eviction is always off).
        init: Create a new repository instead of opening one. Memory
            repositories start empty and are always initialized.

    Raises:
        AlreadyInitialized: ``init=True`` on an existing disk repository.
        NotInitialized: ``init=False`` on an empty disk location.
    """
    backend: KVStore
    repo_path: Path | None = None
    if kind == "memory":
        backend = Memory()
        init = True
    elif kind == "disk":
        if path is None:
            raise ValueError("path is required when kind='disk'")
        from .kv.disk import Disk

        repo_path = Path(path)
        if not init and not repo_path.is_dir():
            raise NotInitialized(str(repo_path))
        backend = Disk(str(repo_path), size_limit=size_limit)
    else:
        raise ValueError(f"Unknown kind: {kind!r}")

    tree = _work_tree(work_tree, repo_path)
    if init:
        return Repository.init(backend, tree, branch=branch)
    return Repository.open(backend, tree)


def _work_tree(
    work_tree: WorkingTree | str | os.PathLike | None, repo_path: Path | None
) -> WorkingTree:
    if isinstance(work_tree, WorkingTree):
        return work_tree
    if work_tree is None:
        if repo_path is None:
            return MemoryTree()
        work_tree = repo_path.resolve().parent
    root = Path(work_tree)
    ignore: tuple[str, ...] = ()
    if repo_path is not None and repo_path.resolve().parent == root.resolve():
        ignore = (repo_path.name,)
    return Directory(root, ignore=ignore)
