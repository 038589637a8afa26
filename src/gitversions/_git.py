"""Git client for the shared working tree.

Working-tree commands (checkout, fetch, diff, apply, reset) shell out to the
``git`` CLI; dulwich handles repository detection and initialisation.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo as DulwichRepo

from .exceptions import GitCommandError

logger = logging.getLogger(__name__)

# Conflict detection matches git's English messages
_GIT_ENV = {"LC_ALL": "C", "GIT_TERMINAL_PROMPT": "0"}


class GitClient:
    """Runs git commands against a single non-bare repository."""

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"GitClient({str(self.path)!r})"

    def run(self, *args: str) -> str:
        """Run ``git <args>`` in the repository and return decoded stdout.

        Raises:
            GitCommandError: If git exits non-zero.
        """
        env = dict(os.environ)
        env.update(_GIT_ENV)
        logger.debug("git %s", " ".join(args))
        result = subprocess.run(
            ["git", *args],
            cwd=str(self.path),
            capture_output=True,
            env=env,
        )
        stdout = result.stdout.decode("utf-8", errors="surrogateescape")
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            if stdout.strip():
                stderr = f"{stderr}\n{stdout.strip()}" if stderr else stdout.strip()
            raise GitCommandError(list(args), result.returncode, stderr)
        return stdout

    def is_repository(self) -> bool:
        """Return True if the directory itself holds a git repository."""
        try:
            with DulwichRepo(str(self.path)):
                return True
        except NotGitRepository:
            return False

    def init(self) -> None:
        """Create an empty non-bare repository in the directory."""
        DulwichRepo.init(str(self.path)).close()

    def checkout(self, ref: str, *, force: bool = True) -> None:
        args = ["checkout"]
        if force:
            args.append("--force")
        self.run(*args, ref, "--")

    def fetch(self, remote: str, refspec: str, *, depth: int | None = 1) -> None:
        args = ["fetch", remote, refspec]
        if depth is not None:
            args.append(f"--depth={depth}")
        self.run(*args)

    def diff(self, *flags: str) -> str:
        return self.run("diff", *flags)

    def apply(self, patch_path: str, *, three_way: bool = True, whitespace: str = "nowarn") -> None:
        """Apply the patch file at *patch_path* (relative to the working tree).

        Raises :exc:`GitCommandError` on failure, including when the patch
        applied with conflicts.
        """
        args = ["apply"]
        if three_way:
            args.append("--3way")
        args.append(f"--whitespace={whitespace}")
        self.run(*args, patch_path)

    def reset_hard(self) -> None:
        self.run("reset", "--hard")
