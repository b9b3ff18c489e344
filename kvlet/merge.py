"""Three-way merge of another branch into the current branch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .checkout import check_untracked, materialize
from .errors import (
    BranchNotFound,
    CannotMergeSelf,
    UncommittedChangesPresentBeforeMerge,
)

if TYPE_CHECKING:
    from .repository import Repository

TAKE = "take"
REMOVE = "remove"
CONFLICT = "conflict"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge operation.

    ``strategy`` is ``"fast_forward"`` (current branch moved to the target
    tip, no new commit), ``"ancestor"`` (target already contained in the
    current branch, nothing done) or ``"three_way"`` (merge commit created,
    possibly with conflicts left as marker text).
    """

    merged: bool
    commit: str | None
    strategy: str  # "fast_forward", "ancestor", "three_way"
    base: str | None = None
    taken: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    conflicts: tuple[str, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def __bool__(self) -> bool:
        return self.merged


def classify(
    base: dict[str, str], current: dict[str, str], target: dict[str, str]
) -> dict[str, str]:
    """Decide what happens to each path, comparing digests only.

    An absent path counts as its own value. Paths needing no action are
    left out of the result:

    - both sides agree: nothing to do
    - only the target changed it: ``TAKE`` (or ``REMOVE`` if the target
      deleted it)
    - only the current side changed it: keep ours
    - both changed it differently: ``CONFLICT``
    """
    decisions: dict[str, str] = {}
    for path in sorted(set(base) | set(current) | set(target)):
        old = base.get(path)
        ours = current.get(path)
        theirs = target.get(path)
        if ours == theirs or theirs == old:
            continue
        if ours == old:
            decisions[path] = REMOVE if theirs is None else TAKE
        else:
            decisions[path] = CONFLICT
    return decisions


def conflict_text(ours: bytes | None, theirs: bytes | None) -> bytes:
    """Whole-file conflict markers around both versions (missing side empty)."""
    return (
        b"<<<<<<< HEAD\n"
        + (ours or b"")
        + b"=======\n"
        + (theirs or b"")
        + b">>>>>>>\n"
    )


def merge(repo: Repository, branch: str) -> MergeResult:
    """Merge branch ``branch`` into the current branch.

    Raises:
        UncommittedChangesPresentBeforeMerge: If anything is staged.
        BranchNotFound: If ``branch`` does not exist.
        CannotMergeSelf: If ``branch`` is the current branch.
        UntrackedFileConflict: If the merge would overwrite untracked
            files. Nothing is modified in that case.
    """
    if repo.index.has_changes:
        raise UncommittedChangesPresentBeforeMerge()
    if not repo.branches.exists(branch):
        raise BranchNotFound(branch)
    current_branch, ours = repo.branches.current()
    if branch == current_branch:
        raise CannotMergeSelf(branch)

    theirs = repo.branches.get(branch)
    base = repo.commits.merge_base(ours, theirs)

    if base == ours:
        materialize(repo, repo.commits.get(theirs).snapshot)
        repo.branches.advance(current_branch, theirs)
        logger.info("fast-forwarded %s to %s", current_branch, theirs)
        return MergeResult(
            merged=True, commit=theirs, strategy="fast_forward", base=base
        )

    if base == theirs:
        logger.info("%s is already an ancestor of %s", branch, current_branch)
        return MergeResult(merged=False, commit=ours, strategy="ancestor", base=base)

    current_snapshot = repo.commits.get(ours).snapshot
    target_snapshot = repo.commits.get(theirs).snapshot
    base_snapshot = repo.commits.get(base).snapshot if base is not None else {}

    check_untracked(repo, current_snapshot, target_snapshot)
    decisions = classify(base_snapshot, current_snapshot, target_snapshot)

    taken: list[str] = []
    removed: list[str] = []
    conflicts: list[str] = []
    for path, decision in decisions.items():
        if decision == TAKE:
            content = repo.objects.get(target_snapshot[path])
            repo.worktree.write(path, content)
            repo.index.add(path, content)
            taken.append(path)
        elif decision == REMOVE:
            repo.worktree.delete(path)
            repo.index.remove(path, current_snapshot[path])
            removed.append(path)
        else:
            content = conflict_text(
                _blob_or_none(repo, current_snapshot.get(path)),
                _blob_or_none(repo, target_snapshot.get(path)),
            )
            repo.worktree.write(path, content)
            repo.index.add(path, content)
            conflicts.append(path)

    message = f"Merged {branch} into {current_branch}."
    commit_id = repo.commit_index(message, merge_parent=theirs)
    if conflicts:
        logger.info("merge conflict in %s", ", ".join(conflicts))
    return MergeResult(
        merged=True,
        commit=commit_id,
        strategy="three_way",
        base=base,
        taken=tuple(taken),
        removed=tuple(removed),
        conflicts=tuple(conflicts),
    )


def _blob_or_none(repo: Repository, blob: str | None) -> bytes | None:
    return None if blob is None else repo.objects.get(blob)
