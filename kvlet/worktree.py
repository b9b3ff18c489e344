"""Working tree backends: the files the repository reads and writes."""

import os
from abc import ABC, abstractmethod
from pathlib import Path

from .errors import FileNotFound, PathOutsideWorkTree


class WorkingTree(ABC):
    """Flat collection of files addressed by relative path."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Return the content at ``path``. Raises FileNotFound if absent."""

    @abstractmethod
    def write(self, path: str, data: bytes) -> None:
        """Create or overwrite ``path``."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove ``path``. No-op if absent."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Whether a regular file exists at ``path``."""

    @abstractmethod
    def list_files(self) -> list[str]:
        """Regular file names at the top level, sorted. Not recursive."""


class Directory(WorkingTree):
    """Working tree rooted at a directory on disk.

    Args:
        root: The directory holding the working files.
        ignore: Top-level names never listed (the repository's own
            metadata directory).
    """

    def __init__(self, root: str | os.PathLike, ignore: tuple[str, ...] = ()) -> None:
        self.root = Path(root)
        self.ignore = frozenset(ignore)

    def _path(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise PathOutsideWorkTree(path)
        return target

    def read(self, path: str) -> bytes:
        target = self._path(path)
        if not target.is_file():
            raise FileNotFound(path)
        return target.read_bytes()

    def write(self, path: str, data: bytes) -> None:
        target = self._path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def delete(self, path: str) -> None:
        self._path(path).unlink(missing_ok=True)

    def exists(self, path: str) -> bool:
        return self._path(path).is_file()

    def list_files(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if entry.is_file() and entry.name not in self.ignore
        )


class MemoryTree(WorkingTree):
    """In-memory working tree."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})

    def read(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFound(path) from None

    def write(self, path: str, data: bytes) -> None:
        if not isinstance(data, bytes):
            raise TypeError(f"Expected bytes, got {type(data).__name__}")
        self.files[path] = data

    def delete(self, path: str) -> None:
        self.files.pop(path, None)

    def exists(self, path: str) -> bool:
        return path in self.files

    def list_files(self) -> list[str]:
        return sorted(p for p in self.files if "/" not in p)
