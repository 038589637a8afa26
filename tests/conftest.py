"""Shared fixtures for gitversions tests.

Tests build a small upstream repository with two tagged releases and one
untagged nightly commit, and serve it over ``file://`` so shallow fetches
behave as they do against a real remote.
"""

import subprocess
from dataclasses import dataclass, field

import httpx
import pytest

from gitversions import CommitLookup, GitClient, VersionedFileRepository

APP_V1 = b"line one\nline two\nline three\n"
APP_V2 = b"line one\nline TWO (0.2.0)\nline three\n"
DATA_V1 = b"\x00\x01\x02\x03binary\xff"
DATA_V2 = b"\x00\x01\x02\x03changed\xfe"


def _git(cwd, *args):
    subprocess.run(
        ["git", "-c", "user.name=test", "-c", "user.email=test@localhost",
         "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=str(cwd), check=True, capture_output=True,
    )


def _write(root, files):
    for rel, data in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)


@dataclass
class Upstream:
    path: object
    url: str
    nightly_sha: str = ""
    nightly_version: str = ""


@dataclass
class FakeCommitsApi:
    """In-memory commits endpoint for :class:`httpx.MockTransport`."""

    shas: dict = field(default_factory=dict)
    requests: list = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        short = request.url.path.rsplit("/", 1)[1]
        for sha in self.shas.values():
            if sha.startswith(short):
                return httpx.Response(200, json={"sha": sha})
        return httpx.Response(404, json={"message": "No commit found for SHA: " + short})


@pytest.fixture
def upstream(tmp_path):
    """Upstream repo with tags v0.1.0, v0.2.0 and a nightly commit."""
    root = tmp_path / "upstream"
    root.mkdir()
    _git(root, "init", "-q")
    _git(root, "config", "uploadpack.allowAnySHA1InWant", "true")

    _write(root, {
        "README.md": b"hello\n",
        "src/app.js": APP_V1,
        "src/util.js": b"export {};\n",
        "data.bin": DATA_V1,
        ".hidden": b"secret\n",
    })
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", "0.1.0")
    _git(root, "tag", "v0.1.0")

    _write(root, {
        "src/app.js": APP_V2,
        "data.bin": DATA_V2,
        "docs/guide.md": b"# Guide\n",
    })
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", "0.2.0")
    _git(root, "tag", "v0.2.0")

    _write(root, {"README.md": b"nightly\n"})
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", "nightly")
    sha = subprocess.run(
        ["git", "rev-parse", "HEAD"], cwd=str(root), check=True, capture_output=True,
    ).stdout.decode().strip()

    return Upstream(
        path=root,
        url=root.as_uri(),
        nightly_sha=sha,
        nightly_version=f"0.0.0-{sha[:7]}-20210101",
    )


@pytest.fixture
def commits_api(upstream):
    return FakeCommitsApi(shas={upstream.nightly_version: upstream.nightly_sha})


@pytest.fixture
def lookup(commits_api):
    client = httpx.Client(transport=httpx.MockTransport(commits_api))
    yield CommitLookup("https://example.invalid/commits", client=client)
    client.close()


@pytest.fixture
def repo(tmp_path, upstream, lookup):
    r = VersionedFileRepository.open(tmp_path / "checkout", remote_url=upstream.url, lookup=lookup)
    yield r
    r.close()


def tree_status(path) -> str:
    """``git status --porcelain`` including untracked files."""
    return GitClient(path).run("status", "--porcelain", "--untracked-files=all")
