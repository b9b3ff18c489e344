"""kvlet: a small version-control engine over a key-value store."""

from .branches import Branch, BranchTable
from .commits import Commit, CommitGraph
from .errors import (
    AlreadyInitialized,
    AlreadyOnBranch,
    BranchAlreadyExists,
    BranchNotFound,
    CannotMergeSelf,
    CannotRemoveCurrentBranch,
    CommitNotFound,
    CorruptRecord,
    EmptyMessage,
    FileNotFound,
    FileNotInCommit,
    KvletError,
    NoReasonToRemove,
    NotInitialized,
    NothingToCommit,
    ObjectNotFound,
    PathOutsideWorkTree,
    UncommittedChangesPresentBeforeMerge,
    UntrackedFileConflict,
)
from .kv.base import KVStore
from .merge import MergeResult
from .objects import ObjectStore, digest
from .repository import LogEntry, Repository, Status
from .staging import StagingIndex
from .store import repository
from .worktree import Directory, MemoryTree, WorkingTree

__version__ = "0.1.0"

__all__ = [
    "AlreadyInitialized",
    "AlreadyOnBranch",
    "Branch",
    "BranchAlreadyExists",
    "BranchNotFound",
    "BranchTable",
    "CannotMergeSelf",
    "CannotRemoveCurrentBranch",
    "Commit",
    "CommitGraph",
    "CommitNotFound",
    "CorruptRecord",
    "Directory",
    "EmptyMessage",
    "FileNotFound",
    "FileNotInCommit",
    "KVStore",
    "KvletError",
    "LogEntry",
    "MemoryTree",
    "MergeResult",
    "NoReasonToRemove",
    "NotInitialized",
    "NothingToCommit",
    "ObjectNotFound",
    "ObjectStore",
    "PathOutsideWorkTree",
    "Repository",
    "StagingIndex",
    "Status",
    "UncommittedChangesPresentBeforeMerge",
    "UntrackedFileConflict",
    "WorkingTree",
    "digest",
    "repository",
]
