"""Console-script target for ``gitversions``.

click ships with the ``cli`` extra only, so the library itself stays
importable without it.  When the extra is absent the command exits with
a hint instead of a traceback.
"""

import sys

MISSING_CLICK = (
    "gitversions: command-line support is not installed.\n"
    "Add it with:  pip install 'gitversions[cli]'"
)


def main():
    try:
        from .cli import main as cli
    except ImportError:
        sys.exit(MISSING_CLICK)
    cli()
