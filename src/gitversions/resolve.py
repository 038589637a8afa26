"""Map release version strings to git references.

Stable releases are tagged ``v<version>`` upstream.  Nightly builds are
published as ``0.0.0-<shortHash>-<date>`` (which sorts below ``0.0.0``); a
shallow fetch needs the full commit id, and a remote will not expand an
abbreviated one, so nightlies go through a commit metadata lookup.
"""

from __future__ import annotations

import logging
import re

import httpx
import semver

from .exceptions import InvalidVersionError, RefResolutionError

__all__ = [
    "DEFAULT_COMMIT_ENDPOINT",
    "CommitLookup",
    "VersionResolver",
    "is_nightly",
    "parse_version",
]

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_ENDPOINT = "https://api.github.com/repos/facebook/react-native/commits"

_BASELINE = semver.Version(0, 0, 0)
_FULL_SHA_RE = re.compile(r"^[0-9a-f]{40}$")


def parse_version(version: str) -> semver.Version:
    """Parse *version* strictly.

    Raises:
        InvalidVersionError: If *version* is not a valid semantic version.
    """
    if not isinstance(version, str):
        raise InvalidVersionError(repr(version))
    try:
        return semver.Version.parse(version)
    except ValueError:
        raise InvalidVersionError(version) from None


def is_nightly(version: str) -> bool:
    """Return True if *version* sorts below ``0.0.0`` (a nightly build)."""
    return parse_version(version) < _BASELINE


def _short_hash(parsed: semver.Version) -> str:
    # First pre-release identifier, up to the first '.' or '-'
    return re.split(r"[.-]", parsed.prerelease, maxsplit=1)[0]


class CommitLookup:
    """Expands abbreviated commit hashes through a commits REST endpoint.

    ``GET <endpoint>/<shortHash>`` must answer with JSON containing the full
    ``sha``.  Pass *client* to reuse (or mock) an :class:`httpx.Client`.
    """

    def __init__(self, endpoint: str = DEFAULT_COMMIT_ENDPOINT, *, client: httpx.Client | None = None):
        self.endpoint = endpoint.rstrip("/")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(follow_redirects=True)

    def __repr__(self) -> str:
        return f"CommitLookup({self.endpoint!r})"

    def expand_short_hash(self, short_hash: str) -> str:
        """Return the 40-character commit id for *short_hash*.

        Raises:
            RefResolutionError: On a transport error, a non-2xx response,
                or a body without a full ``sha``.
        """
        url = f"{self.endpoint}/{short_hash}"
        logger.debug("Looking up commit %s at %s", short_hash, url)
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise RefResolutionError(short_hash, str(exc)) from exc
        if not response.is_success:
            raise RefResolutionError(short_hash, f"HTTP {response.status_code}")
        try:
            sha = response.json()["sha"]
        except (ValueError, KeyError, TypeError):
            raise RefResolutionError(short_hash, "response has no commit sha") from None
        if not isinstance(sha, str) or not _FULL_SHA_RE.match(sha):
            raise RefResolutionError(short_hash, f"unexpected sha {sha!r}")
        return sha

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class VersionResolver:
    """Turns a version string into something ``git fetch`` can ask for."""

    def __init__(self, lookup: CommitLookup):
        self._lookup = lookup

    def resolve(self, version: str) -> str:
        """Return the git reference or full commit id for *version*.

        Raises:
            InvalidVersionError: If *version* is malformed.
            RefResolutionError: If a nightly's commit cannot be looked up.
        """
        parsed = parse_version(version)
        if parsed < _BASELINE:
            return self._lookup.expand_short_hash(_short_hash(parsed))
        return f"refs/tags/v{version}"
