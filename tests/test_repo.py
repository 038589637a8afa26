"""Tests for the VersionedFileRepository facade."""

import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from gitversions import (
    FetchError,
    FileKind,
    GitClient,
    InvalidVersionError,
    VersionedFileRepository,
    bind_version,
    default_git_directory,
)

from conftest import APP_V1, APP_V2, tree_status


class TestOpen:
    def test_creates_repository(self, tmp_path, upstream, lookup):
        path = tmp_path / "a" / "b"
        with VersionedFileRepository.open(path, remote_url=upstream.url, lookup=lookup) as repo:
            assert repo.path == path
            assert GitClient(path).is_repository()
            assert repo.checked_out_version is None

    def test_reopen_existing(self, tmp_path, upstream, lookup):
        path = tmp_path / "checkout"
        with VersionedFileRepository.open(path, remote_url=upstream.url, lookup=lookup) as repo:
            repo.read_file("README.md", "0.1.0")
        with VersionedFileRepository.open(path, remote_url="file:///nonexistent", lookup=lookup) as repo:
            # Served from the local branch; the bogus remote is never contacted
            assert repo.read_file("src/app.js", "0.1.0") == APP_V1

    def test_default_directory(self):
        assert default_git_directory() == Path(tempfile.gettempdir()) / "gitversions" / "git"


class TestReads:
    def test_read_file(self, repo):
        assert repo.read_file("src/app.js", "0.1.0") == APP_V1
        assert repo.read_file("src/app.js", "0.2.0") == APP_V2
        assert repo.checked_out_version == "0.2.0"

    def test_read_missing(self, repo):
        assert repo.read_file("nope.txt", "0.1.0") is None

    def test_read_directory(self, repo):
        assert repo.read_file("src", "0.1.0") is None

    def test_list_files(self, repo):
        assert repo.list_files(None, "0.1.0") == ["README.md", "data.bin", "src/app.js", "src/util.js"]
        assert repo.list_files(["**/*.md"], "0.2.0") == ["README.md", "docs/guide.md"]

    def test_stat(self, repo):
        assert repo.stat("src", "0.1.0") is FileKind.DIRECTORY
        assert repo.stat("src/app.js", "0.1.0") is FileKind.FILE
        assert repo.stat("docs", "0.1.0") is FileKind.NONE
        assert repo.stat("docs", "0.2.0") is FileKind.DIRECTORY

    def test_nightly(self, repo, upstream):
        assert repo.read_file("README.md", upstream.nightly_version) == b"nightly\n"


class TestErrors:
    def test_invalid_version_not_queued(self, repo):
        with pytest.raises(InvalidVersionError):
            repo.read_file("README.md", "0.1")
        assert repo.checked_out_version is None

    def test_missing_version(self, repo):
        with pytest.raises(FetchError, match="Does it exist"):
            repo.read_file("README.md", "3.0.0")

    def test_failure_does_not_block_queue(self, repo):
        with pytest.raises(FetchError):
            repo.list_files(None, "3.0.0")
        assert repo.read_file("README.md", "0.1.0") == b"hello\n"


class TestConcurrency:
    def test_concurrent_versions(self, repo):
        jobs = [("0.1.0", APP_V1), ("0.2.0", APP_V2)] * 10

        def read(job):
            version, expected = job
            return repo.read_file("src/app.js", version) == expected

        with ThreadPoolExecutor(max_workers=6) as pool:
            assert all(pool.map(read, jobs))
        assert tree_status(repo.path) == ""

    def test_concurrent_patches(self, repo):
        def round_trip(i):
            version = "0.1.0" if i % 2 else "0.2.0"
            content = b"line one\nline %d\nline three\n" % i
            patch = repo.generate_patch("src/app.js", version, content)
            return repo.get_patched_file("src/app.js", version, patch).patched_file == content

        with ThreadPoolExecutor(max_workers=4) as pool:
            assert all(pool.map(round_trip, range(8)))
        assert tree_status(repo.path) == ""


class TestBindVersion:
    def test_bound_operations(self, repo):
        v1 = bind_version(repo, "0.1.0")
        assert v1.version == "0.1.0"
        assert v1.read_file("src/app.js") == APP_V1
        assert v1.stat("data.bin") is FileKind.FILE
        assert "src/util.js" in v1.list_files()
        patch = v1.generate_patch("README.md", b"bye\n")
        assert v1.get_patched_file("README.md", patch).patched_file == b"bye\n"

    def test_invalid_version(self, repo):
        with pytest.raises(InvalidVersionError):
            bind_version(repo, "main")
