"""Commands: ls, cat, stat, diff, patch."""

from __future__ import annotations

import sys

import click

from ..filestore import FileKind
from ._helpers import main, _open_repo, _run, _status


# ---------------------------------------------------------------------------
# ls
# ---------------------------------------------------------------------------

@main.command()
@click.argument("version")
@click.argument("globs", nargs=-1)
@click.pass_context
def ls(ctx, version, globs):
    """List files of VERSION, optionally filtered by GLOBS."""
    repo = _open_repo(ctx)
    for path in _run(repo.list_files, list(globs) or None, version):
        click.echo(path)


# ---------------------------------------------------------------------------
# cat
# ---------------------------------------------------------------------------

@main.command()
@click.argument("version")
@click.argument("path")
@click.pass_context
def cat(ctx, version, path):
    """Write the contents of PATH in VERSION to stdout."""
    repo = _open_repo(ctx)
    data = _run(repo.read_file, path, version)
    if data is None:
        raise click.ClickException(f"File not found: {path}")
    sys.stdout.buffer.write(data)


# ---------------------------------------------------------------------------
# stat
# ---------------------------------------------------------------------------

@main.command()
@click.argument("version")
@click.argument("path")
@click.pass_context
def stat(ctx, version, path):
    """Print whether PATH in VERSION is a file, directory, or none."""
    repo = _open_repo(ctx)
    kind: FileKind = _run(repo.stat, path, version)
    click.echo(kind.value)


# ---------------------------------------------------------------------------
# diff
# ---------------------------------------------------------------------------

@main.command()
@click.argument("version")
@click.argument("path")
@click.argument("local", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def diff(ctx, version, path, local):
    """Print a patch turning PATH in VERSION into the LOCAL file."""
    repo = _open_repo(ctx)
    with open(local, "rb") as f:
        content = f.read()
    patch = _run(repo.generate_patch, path, version, content)
    sys.stdout.buffer.write(patch.encode("utf-8", errors="surrogateescape"))


# ---------------------------------------------------------------------------
# patch
# ---------------------------------------------------------------------------

@main.command()
@click.argument("version")
@click.argument("path")
@click.argument("patch_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(dir_okay=False),
              help="Write the merged file here instead of stdout.")
@click.pass_context
def patch(ctx, version, path, patch_file, output):
    """Apply PATCH_FILE to PATH in VERSION and print the merged file.

    The checkout is left untouched. Exits with status 1 if conflicts remain.
    """
    repo = _open_repo(ctx)
    with open(patch_file, "rb") as f:
        patch_content = f.read().decode("utf-8", errors="surrogateescape")
    result = _run(repo.get_patched_file, path, version, patch_content)

    if result.patched_file is None:
        if result.has_conflicts:
            raise click.ClickException(f"Binary conflict in {path}; no merged content available")
        _status(ctx, f"{path} was removed by the patch")
    elif output:
        with open(output, "wb") as f:
            f.write(result.patched_file)
        _status(ctx, f"Wrote {output}")
    else:
        sys.stdout.buffer.write(result.patched_file)

    if result.has_conflicts:
        click.echo(f"Conflicts in {path}", err=True)
        ctx.exit(1)
