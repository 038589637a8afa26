"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import logging

import click

from ..checkout import DEFAULT_REMOTE_URL
from ..exceptions import GitVersionsError
from ..repo import VersionedFileRepository
from ..resolve import DEFAULT_COMMIT_ENDPOINT


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _open_repo(ctx) -> VersionedFileRepository:
    """Open the checkout named by --dir/--remote/--commit-endpoint (or their env vars)."""
    repo = VersionedFileRepository.open(
        ctx.obj.get("git_dir"),
        remote_url=ctx.obj.get("remote_url") or DEFAULT_REMOTE_URL,
        commit_endpoint=ctx.obj.get("commit_endpoint") or DEFAULT_COMMIT_ENDPOINT,
    )
    ctx.call_on_close(repo.close)
    _status(ctx, f"Using checkout {repo.path}")
    return repo


def _run(fn, *args):
    """Call a library operation, turning its errors into ClickExceptions."""
    try:
        return fn(*args)
    except GitVersionsError as exc:
        raise click.ClickException(str(exc))


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--dir", "-d", "git_dir", type=click.Path(file_okay=False), envvar="GITVERSIONS_DIR",
              help="Checkout directory (or set GITVERSIONS_DIR). Defaults to a temp dir.")
@click.option("--remote", "remote_url", envvar="GITVERSIONS_REMOTE",
              help="Upstream git URL (or set GITVERSIONS_REMOTE).")
@click.option("--commit-endpoint", "commit_endpoint", envvar="GITVERSIONS_COMMIT_ENDPOINT",
              help="Commits API used to expand nightly hashes (or set GITVERSIONS_COMMIT_ENDPOINT).")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, git_dir, remote_url, commit_endpoint, verbose):
    """gitversions: files of any upstream release, from one checkout.

    \b
    Quick start:
      gitversions ls 0.68.0 'Libraries/**/*.js'
      gitversions cat 0.68.0 package.json
      gitversions diff 0.68.0 package.json my-package.json > my.patch
      gitversions patch 0.69.0 package.json my.patch

    \b
    Versions not fetched before are shallow-fetched from the remote.
    Set GITVERSIONS_DIR to keep the checkout somewhere persistent.
    """
    ctx.ensure_object(dict)
    ctx.obj["git_dir"] = git_dir
    ctx.obj["remote_url"] = remote_url
    ctx.obj["commit_endpoint"] = commit_endpoint
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
