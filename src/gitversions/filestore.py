"""FileSystemStore: plain file access rooted at a directory."""

from __future__ import annotations

import enum
import os
import shutil
from pathlib import Path

from ._glob import filter_paths

__all__ = ["FileKind", "FileSystemStore"]


class FileKind(str, enum.Enum):
    """What a path refers to in a checkout."""

    FILE = "file"
    DIRECTORY = "directory"
    NONE = "none"


def _relative_path(path: str | os.PathLike[str]) -> str:
    """Return *path* as a POSIX path that stays inside the checkout."""
    raw = os.fspath(path)
    if os.name == "nt":
        raw = raw.replace("\\", "/")
    segments = raw.strip("/").split("/")
    if segments == [""]:
        raise ValueError("Path must name something inside the checkout")
    if any(seg in ("", ".", "..") for seg in segments):
        raise ValueError(f"Path {raw!r} is not a plain relative path")
    return "/".join(segments)


class FileSystemStore:
    """Reads and writes files under *root*, ignoring the ``.git`` directory."""

    def __init__(self, root: str | os.PathLike[str]):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"FileSystemStore({str(self.root)!r})"

    def _abspath(self, path: str | os.PathLike[str]) -> Path:
        return self.root / _relative_path(path)

    def list_files(self, globs: list[str] | None = None) -> list[str]:
        """Return sorted relative paths of files matching *globs*.

        *globs* defaults to ``["**"]``.  Patterns prefixed with ``!``
        exclude matches.  Dotfiles only match patterns that name them
        explicitly.
        """
        paths = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            rel_dir = os.path.relpath(dirpath, self.root)
            if rel_dir == ".":
                dirnames[:] = [d for d in dirnames if d != ".git"]
                prefix = ""
            else:
                prefix = rel_dir.replace(os.sep, "/") + "/"
            for name in filenames:
                paths.append(prefix + name)
        return sorted(filter_paths(globs or ["**"], paths))

    def read_file(self, path: str | os.PathLike[str]) -> bytes | None:
        """Return the contents of *path*, or ``None`` if it is not a file."""
        try:
            return self._abspath(path).read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None

    def stat(self, path: str | os.PathLike[str]) -> FileKind:
        p = self._abspath(path)
        if p.is_file():
            return FileKind.FILE
        if p.is_dir():
            return FileKind.DIRECTORY
        return FileKind.NONE

    def write_file(self, path: str | os.PathLike[str], data: bytes | str) -> None:
        """Write *data* to *path*, creating parent directories as needed."""
        p = self._abspath(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            data = data.encode("utf-8", errors="surrogateescape")
        p.write_bytes(data)

    def first_missing(self, path: str | os.PathLike[str]) -> str | None:
        """Return the shallowest component of *path* that does not exist.

        That is the path a :meth:`write_file` of *path* would create, so
        removing it undoes the write.  ``None`` if *path* already exists.
        """
        segments = _relative_path(path).split("/")
        for depth in range(1, len(segments) + 1):
            prefix = "/".join(segments[:depth])
            if self.stat(prefix) is FileKind.NONE:
                return prefix
        return None

    def remove(self, path: str | os.PathLike[str]) -> None:
        """Remove the file or directory tree at *path* if it exists."""
        p = self._abspath(path)
        if p.is_dir() and not p.is_symlink():
            shutil.rmtree(p)
        else:
            p.unlink(missing_ok=True)
