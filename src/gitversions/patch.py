"""Patch generation and application against the checked-out version.

Both operations mutate the working tree and then put it back: every exit
path runs ``git reset --hard`` and removes the files the operation created,
so the next queued operation sees a pristine checkout.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from ._git import GitClient
from .exceptions import EmptyPatchError, GitCommandError, PatchApplyError
from .filestore import FileSystemStore

__all__ = [
    "PATCH_FILENAME",
    "ApplyFailure",
    "PatchResult",
    "PatchTransaction",
    "classify_apply_failure",
]

logger = logging.getLogger(__name__)

PATCH_FILENAME = "gitversions.patch"

DIFF_FLAGS = ("--patch", "--ignore-space-at-eol", "--binary")

# Exact phrases from ``git apply --3way`` output (LC_ALL=C).
CONFLICT_MARKER = "with conflicts"
BINARY_CONFLICT_MARKER = "Cannot merge binary files"


class ApplyFailure(enum.Enum):
    """How a failed ``git apply --3way`` should be treated."""

    TEXT_CONFLICT = "text-conflict"
    BINARY_CONFLICT = "binary-conflict"
    ERROR = "error"


def classify_apply_failure(message: str) -> ApplyFailure:
    """Classify the output of a failed ``git apply --3way``.

    git reports a three-way apply that left conflicts through its exit
    status and the phrase ``"with conflicts"``; there is no structured
    signal.  A conflict whose output also says ``"Cannot merge binary
    files"`` left no text to show.  Anything else is a real failure.
    """
    if CONFLICT_MARKER not in message:
        return ApplyFailure.ERROR
    if BINARY_CONFLICT_MARKER in message:
        return ApplyFailure.BINARY_CONFLICT
    return ApplyFailure.TEXT_CONFLICT


@dataclass(frozen=True, slots=True)
class PatchResult:
    """Outcome of applying a patch to one file.

    Attributes:
        patched_file: Merged contents, possibly with conflict markers, or
            ``None`` for a binary conflict (or if the patch removed the file).
        has_conflicts: Whether the three-way merge left conflicts.
    """

    patched_file: bytes | None
    has_conflicts: bool


class PatchTransaction:
    """Patch operations on a working tree owned by the caller's queue slot."""

    def __init__(self, git: GitClient, files: FileSystemStore):
        self._git = git
        self._files = files

    @contextmanager
    def clean_tree(self, *created: str) -> Iterator[None]:
        """Hard-reset the tree and remove *created* untracked paths on exit."""
        try:
            yield
        finally:
            self._git.reset_hard()
            for path in created:
                self._files.remove(path)

    def generate_patch(self, filename: str, new_content: bytes | str) -> str:
        """Return a git-style patch turning *filename* into *new_content*.

        Raises:
            EmptyPatchError: If *new_content* matches the checked-out file.
        """
        # Paths git does not track yet, parent directories included, must not
        # outlive the transaction
        missing = self._files.first_missing(filename)
        created = (missing,) if missing is not None else ()
        with self.clean_tree(*created):
            self._files.write_file(filename, new_content)
            patch = self._git.diff(*DIFF_FLAGS)
            if not patch:
                raise EmptyPatchError(filename)
            return patch

    def apply_patch(self, filename: str, patch_content: str) -> PatchResult:
        """Three-way apply *patch_content* and return the merged *filename*.

        The working tree is restored afterwards; the stored file is not
        modified.

        Raises:
            PatchApplyError: If git fails for a reason other than conflicts.
        """
        with self.clean_tree(PATCH_FILENAME):
            self._files.write_file(PATCH_FILENAME, patch_content)
            outcome = None
            try:
                self._git.apply(PATCH_FILENAME, three_way=True, whitespace="nowarn")
            except GitCommandError as exc:
                outcome = classify_apply_failure(exc.stderr)
                if outcome is ApplyFailure.ERROR:
                    raise PatchApplyError(exc.stderr) from exc
                logger.debug("Patch for %s applied with conflicts (%s)", filename, outcome.value)

            if outcome is ApplyFailure.BINARY_CONFLICT:
                patched_file = None
            else:
                patched_file = self._files.read_file(filename)
            return PatchResult(patched_file=patched_file, has_conflicts=outcome is not None)
