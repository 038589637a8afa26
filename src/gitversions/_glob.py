"""Dotfile-aware glob matching over relative POSIX paths."""

from __future__ import annotations

from fnmatch import fnmatchcase as _fnmatch


def _glob_match(pattern: str, name: str) -> bool:
    """Match *name* against a single glob *pattern* segment.

    ``*`` and ``?`` do not match a leading ``.`` unless the pattern itself
    starts with ``.`` (Unix/rsync convention).
    """
    if not pattern.startswith(".") and name.startswith("."):
        return False
    return _fnmatch(name, pattern)


def _match_segments(pattern: list[str], parts: list[str]) -> bool:
    if not pattern:
        return not parts
    seg, rest = pattern[0], pattern[1:]
    if seg == "**":
        # Zero or more non-dot directory levels
        if _match_segments(rest, parts):
            return True
        return bool(parts) and not parts[0].startswith(".") and _match_segments(pattern, parts[1:])
    if not parts:
        return False
    if "*" in seg or "?" in seg or "[" in seg:
        if not _glob_match(seg, parts[0]):
            return False
    elif seg != parts[0]:
        return False
    return _match_segments(rest, parts[1:])


def path_matches(pattern: str, path: str) -> bool:
    """Return True if the relative *path* matches *pattern*.

    Supports ``*``, ``?``, ``[...]`` within a segment and ``**`` for any
    number of directory levels.  A pattern starting with ``!`` never matches;
    use :func:`filter_paths` for negation.
    """
    if pattern.startswith("!"):
        return False
    return _match_segments(pattern.strip("/").split("/"), path.split("/"))


def filter_paths(globs: list[str], paths: list[str]) -> list[str]:
    """Keep the *paths* matched by any positive glob and no ``!`` glob."""
    positive = [g for g in globs if not g.startswith("!")]
    negative = [g[1:] for g in globs if g.startswith("!")]
    return [
        p for p in paths
        if any(path_matches(g, p) for g in positive)
        and not any(path_matches(g, p) for g in negative)
    ]
