"""kvlet error types.

Every error carries the user-facing text of the command-line tool as its
default message. The core only raises; the CLI decides what to print and
how to exit.
"""


class KvletError(Exception):
    """Base class for all repository errors."""

    message = "Repository error."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        text = self.message if detail is None else f"{self.message} ({detail})"
        super().__init__(text)


class NotInitialized(KvletError):
    message = "Not in an initialized Gitlet directory."


class AlreadyInitialized(KvletError):
    message = (
        "A Gitlet version-control system already exists in the current directory."
    )


class FileNotFound(KvletError):
    """Raised when ``add`` names a path missing from the working tree."""

    message = "File does not exist."


class NothingToCommit(KvletError):
    message = "No changes added to the commit."


class EmptyMessage(KvletError):
    message = "Please enter a commit message."


class NoReasonToRemove(KvletError):
    message = "No reason to remove the file."


class BranchNotFound(KvletError):
    message = "A branch with that name does not exist."


class BranchAlreadyExists(KvletError):
    message = "A branch with that name already exists."


class CannotRemoveCurrentBranch(KvletError):
    message = "Cannot remove the current branch."


class AlreadyOnBranch(KvletError):
    message = "No need to checkout the current branch."


class CommitNotFound(KvletError):
    message = "No commit with that id exists."


class ObjectNotFound(KvletError):
    """Raised when a blob digest has no stored content."""

    message = "No object with that digest exists."


class FileNotInCommit(KvletError):
    message = "File does not exist in that commit."


class PathOutsideWorkTree(KvletError):
    """Raised when a path would resolve outside the working tree's root."""

    message = "Path is outside the working tree."


class UntrackedFileConflict(KvletError):
    """Raised by the safety pass before any working-tree mutation.

    Attributes:
        paths: The untracked paths that would have been overwritten.
    """

    message = (
        "There is an untracked file in the way; "
        "delete it, or add and commit it first."
    )

    def __init__(self, paths: list[str]) -> None:
        self.paths = sorted(paths)
        super().__init__(", ".join(self.paths))


class CannotMergeSelf(KvletError):
    message = "Cannot merge a branch with itself."


class UncommittedChangesPresentBeforeMerge(KvletError):
    message = "You have uncommitted changes."


class CorruptRecord(KvletError):
    """Raised when a stored record cannot be decoded."""

    message = "Stored record is unreadable."
