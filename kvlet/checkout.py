"""Checkout and reset: materializing a commit's snapshot into the working tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import (
    AlreadyOnBranch,
    BranchNotFound,
    FileNotInCommit,
    UntrackedFileConflict,
)

if TYPE_CHECKING:
    from .repository import Repository

logger = logging.getLogger(__name__)


def untracked_in_the_way(
    repo: Repository, current: dict[str, str], target: dict[str, str]
) -> list[str]:
    """Paths ``target`` would write that the working tree holds untracked."""
    return sorted(
        path
        for path in target
        if path not in current and repo.worktree.exists(path)
    )


def check_untracked(
    repo: Repository, current: dict[str, str], target: dict[str, str]
) -> None:
    """Safety pass. Raises UntrackedFileConflict before anything is touched."""
    blocked = untracked_in_the_way(repo, current, target)
    if blocked:
        raise UntrackedFileConflict(blocked)


def materialize(repo: Repository, target: dict[str, str]) -> None:
    """Replace the tracked files of the current commit with ``target``.

    Runs the full safety pass first, then deletes paths tracked now but
    absent from ``target``, then writes every path of ``target``, then
    clears the staging index.
    """
    current = repo.head_commit().snapshot
    check_untracked(repo, current, target)

    doomed = [path for path in current if path not in target]
    for path in doomed:
        repo.worktree.delete(path)
    for path, blob in target.items():
        repo.worktree.write(path, repo.objects.get(blob))
    repo.index.clear()
    logger.debug("materialized %d paths, deleted %d", len(target), len(doomed))


def checkout_branch(repo: Repository, name: str) -> None:
    """Materialize branch ``name``'s tip and make it the current branch."""
    if not repo.branches.exists(name):
        raise BranchNotFound(name)
    if name == repo.branches.head:
        raise AlreadyOnBranch(name)
    materialize(repo, repo.commits.get(repo.branches.get(name)).snapshot)
    repo.branches.switch(name)


def checkout_file(
    repo: Repository, path: str, commit_prefix: str | None = None
) -> None:
    """Write one path from a commit (default: current) into the working tree.

    Skips the safety and deletion passes and leaves the index alone.
    """
    if commit_prefix is None:
        commit_id = repo.head_id()
    else:
        commit_id = repo.commits.resolve(commit_prefix)
    snapshot = repo.commits.get(commit_id).snapshot
    if path not in snapshot:
        raise FileNotInCommit(path)
    repo.worktree.write(path, repo.objects.get(snapshot[path]))


def reset(repo: Repository, commit_prefix: str) -> str:
    """Materialize a commit and move the current branch to it.

    HEAD keeps naming the same branch. Returns the resolved commit id.
    """
    commit_id = repo.commits.resolve(commit_prefix)
    materialize(repo, repo.commits.get(commit_id).snapshot)
    repo.branches.advance(repo.branches.head, commit_id)
    return commit_id
