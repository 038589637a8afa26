"""Switch the shared working tree between versions."""

from __future__ import annotations

import logging

from ._git import GitClient
from .exceptions import FetchError, GitCommandError
from .resolve import VersionResolver

__all__ = ["DEFAULT_REMOTE_URL", "CheckoutManager"]

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_URL = "https://github.com/facebook/react-native.git"


class CheckoutManager:
    """Keeps the working tree on the most recently requested version.

    Every version that has been fetched once lives on as a local branch of
    the same name, so revisiting it is an offline ``checkout``.  Not
    thread-safe: call only from inside a queued operation.
    """

    def __init__(self, git: GitClient, resolver: VersionResolver, remote_url: str = DEFAULT_REMOTE_URL):
        self._git = git
        self._resolver = resolver
        self.remote_url = remote_url
        self.checked_out_version: str | None = None

    def ensure_checked_out(self, version: str) -> None:
        """Make the working tree match *version*.

        A no-op if *version* is already checked out.

        Raises:
            InvalidVersionError: If *version* is malformed and not local.
            RefResolutionError: If a nightly's commit cannot be looked up.
            FetchError: If the version cannot be fetched from the remote.
        """
        if version == self.checked_out_version:
            return
        if not self._try_checkout_local(version):
            self._fetch_and_checkout(version)
        self.checked_out_version = version
        logger.debug("Checked out %s", version)

    def _try_checkout_local(self, version: str) -> bool:
        try:
            self._git.checkout(version, force=True)
        except GitCommandError as exc:
            logger.debug("No local ref for %s: %s", version, exc.stderr)
            return False
        return True

    def _fetch_and_checkout(self, version: str) -> None:
        ref = self._resolver.resolve(version)
        logger.debug("Fetching %s from %s as %s", ref, self.remote_url, version)
        try:
            self._git.fetch(self.remote_url, f"{ref}:{version}", depth=1)
        except GitCommandError as exc:
            raise FetchError(ref, exc.stderr) from exc
        self._git.checkout(version, force=True)
