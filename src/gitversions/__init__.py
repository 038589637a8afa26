from .repo import VersionedFileRepository, VersionBoundRepository, bind_version, default_git_directory
from .filestore import FileKind, FileSystemStore
from .patch import PatchResult, classify_apply_failure
from .resolve import CommitLookup, VersionResolver, is_nightly, parse_version
from .checkout import CheckoutManager
from ._git import GitClient
from ._queue import BatchingQueue
from .exceptions import (
    GitVersionsError,
    InvalidVersionError,
    RefResolutionError,
    FetchError,
    EmptyPatchError,
    PatchApplyError,
    GitCommandError,
)

__all__ = [
    "VersionedFileRepository", "VersionBoundRepository", "bind_version", "default_git_directory",
    "FileKind", "FileSystemStore", "PatchResult", "classify_apply_failure",
    "CommitLookup", "VersionResolver", "is_nightly", "parse_version",
    "CheckoutManager", "GitClient", "BatchingQueue",
    "GitVersionsError", "InvalidVersionError", "RefResolutionError", "FetchError",
    "EmptyPatchError", "PatchApplyError", "GitCommandError",
]
