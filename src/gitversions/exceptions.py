"""Exceptions for gitversions."""


class GitVersionsError(Exception):
    """Base class for all gitversions errors."""


class InvalidVersionError(GitVersionsError, ValueError):
    """Raised when a version string is not a valid semantic version."""

    def __init__(self, version: str):
        super().__init__(f"{version!r} is not a valid semver version")
        self.version = version


class RefResolutionError(GitVersionsError):
    """Raised when an abbreviated commit hash cannot be expanded remotely.

    The lookup is a network call, so callers may retry.
    """

    def __init__(self, short_hash: str, reason: str = ""):
        msg = f"Unable to query commit {short_hash!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.short_hash = short_hash


class FetchError(GitVersionsError):
    """Raised when a shallow fetch of a version's ref fails.

    Usually means the version does not exist upstream.  The underlying
    :class:`GitCommandError` is chained as ``__cause__``.
    """

    def __init__(self, ref: str, reason: str):
        super().__init__(f"Failed to fetch {ref!r}. Does it exist? ({reason})")
        self.ref = ref


class EmptyPatchError(GitVersionsError):
    """Raised when the generated patch is empty (content was unchanged)."""

    def __init__(self, filename: str):
        super().__init__(
            f"Generated patch for {filename} was empty. Is it identical to the original?"
        )
        self.filename = filename


class PatchApplyError(GitVersionsError):
    """Raised when ``git apply`` fails for a reason other than conflicts."""


class GitCommandError(GitVersionsError):
    """Raised when a git subprocess exits non-zero.

    Attributes:
        git_args: The git arguments (without the leading ``git``).
        returncode: Process exit status.
        stderr: Decoded standard error (and standard output, if any), stripped.
    """

    def __init__(self, args: list[str], returncode: int, stderr: str):
        super().__init__(f"git {' '.join(args)} failed: {stderr}")
        self.git_args = list(args)
        self.returncode = returncode
        self.stderr = stderr
