"""VersionedFileRepository: files of any upstream release, from one checkout."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from ._git import GitClient
from ._queue import BatchingQueue
from .checkout import DEFAULT_REMOTE_URL, CheckoutManager
from .filestore import FileKind, FileSystemStore
from .patch import PatchResult, PatchTransaction
from .resolve import DEFAULT_COMMIT_ENDPOINT, CommitLookup, VersionResolver, parse_version

__all__ = ["VersionedFileRepository", "VersionBoundRepository", "bind_version", "default_git_directory"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def default_git_directory() -> Path:
    """Return ``<tmp>/gitversions/git``, the default checkout location."""
    return Path(tempfile.gettempdir()) / __package__ / "git"


class VersionedFileRepository:
    """Read and patch files as of any release, backed by a single git checkout.

    Switching between versions may be slow: a version not seen before is
    shallow-fetched from the remote.  Operations from any number of threads
    are queued and run one at a time, grouped by version, so each one sees
    a clean checkout of the version it asked for.
    """

    def __init__(
        self,
        git: GitClient,
        *,
        remote_url: str = DEFAULT_REMOTE_URL,
        lookup: CommitLookup | None = None,
    ):
        self._git = git
        self._owns_lookup = lookup is None
        self._lookup = lookup if lookup is not None else CommitLookup()
        self._files = FileSystemStore(git.path)
        self._checkout = CheckoutManager(git, VersionResolver(self._lookup), remote_url)
        self._patches = PatchTransaction(git, self._files)
        self._queue: BatchingQueue[str] = BatchingQueue()

    def __repr__(self) -> str:
        return f"VersionedFileRepository({str(self._git.path)!r})"

    @classmethod
    def open(
        cls,
        git_directory: str | os.PathLike[str] | None = None,
        *,
        remote_url: str = DEFAULT_REMOTE_URL,
        commit_endpoint: str = DEFAULT_COMMIT_ENDPOINT,
        lookup: CommitLookup | None = None,
    ) -> VersionedFileRepository:
        """Open (creating if needed) the checkout at *git_directory*.

        Args:
            git_directory: Checkout directory.  Defaults to
                :func:`default_git_directory`.
            remote_url: Upstream repository to fetch versions from.
            commit_endpoint: Commits API used to expand nightly hashes.
                Ignored when *lookup* is given.
            lookup: Preconfigured :class:`CommitLookup`.
        """
        path = Path(git_directory) if git_directory is not None else default_git_directory()
        path.mkdir(parents=True, exist_ok=True)

        git = GitClient(path)
        if not git.is_repository():
            logger.debug("Initializing git repository in %s", path)
            git.init()

        repo = cls(git, remote_url=remote_url, lookup=lookup or CommitLookup(commit_endpoint))
        repo._owns_lookup = lookup is None
        return repo

    @property
    def path(self) -> Path:
        """The checkout directory."""
        return self._git.path

    @property
    def checked_out_version(self) -> str | None:
        """The version currently in the working tree, if any."""
        return self._checkout.checked_out_version

    def list_files(self, globs: list[str] | None, version: str) -> list[str]:
        """List files of *version* matching *globs* (all files if ``None``)."""
        return self._using_version(version, lambda: self._files.list_files(globs))

    def read_file(self, filename: str, version: str) -> bytes | None:
        """Return the contents of *filename* in *version*, or ``None``."""
        return self._using_version(version, lambda: self._files.read_file(filename))

    def stat(self, filename: str, version: str) -> FileKind:
        return self._using_version(version, lambda: self._files.stat(filename))

    def generate_patch(self, filename: str, version: str, new_content: bytes | str) -> str:
        """Generate a git-style patch transforming *filename* into *new_content*.

        Raises:
            EmptyPatchError: If *new_content* is identical to the original.
        """
        return self._using_version(version, lambda: self._patches.generate_patch(filename, new_content))

    def get_patched_file(self, filename: str, version: str, patch_content: str) -> PatchResult:
        """Apply a patch to *filename*, returning the merged result.

        The result may include conflict markers.  The underlying file is not
        mutated.  git cannot represent binary merge conflicts with markers; in
        that case ``patched_file`` is ``None``.
        """
        return self._using_version(version, lambda: self._patches.apply_patch(filename, patch_content))

    def _using_version(self, version: str, fn: Callable[[], T]) -> T:
        parse_version(version)

        def run() -> T:
            self._checkout.ensure_checked_out(version)
            return fn()

        return self._queue.enqueue(version, run).result()

    def close(self) -> None:
        """Wait for queued operations and release the HTTP client."""
        self._queue.close()
        if self._owns_lookup:
            self._lookup.close()

    def __enter__(self) -> VersionedFileRepository:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class VersionBoundRepository:
    """A :class:`VersionedFileRepository` pinned to one version."""

    def __init__(self, repo: VersionedFileRepository, version: str):
        parse_version(version)
        self._repo = repo
        self.version = version

    def __repr__(self) -> str:
        return f"VersionBoundRepository({self._repo!r}, {self.version!r})"

    def list_files(self, globs: list[str] | None = None) -> list[str]:
        return self._repo.list_files(globs, self.version)

    def read_file(self, filename: str) -> bytes | None:
        return self._repo.read_file(filename, self.version)

    def stat(self, filename: str) -> FileKind:
        return self._repo.stat(filename, self.version)

    def generate_patch(self, filename: str, new_content: bytes | str) -> str:
        return self._repo.generate_patch(filename, self.version, new_content)

    def get_patched_file(self, filename: str, patch_content: str) -> PatchResult:
        return self._repo.get_patched_file(filename, self.version, patch_content)


def bind_version(repo: VersionedFileRepository, version: str) -> VersionBoundRepository:
    """Return a view of *repo* whose operations all target *version*."""
    return VersionBoundRepository(repo, version)
