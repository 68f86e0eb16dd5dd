"""
Executable module for fbc-filter.

Running:
    python -m fbcfilter

is equivalent to:
    fbc-filter

This module simply forwards execution to the CLI entrypoint defined in
`fbcfilter.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Report a CLI import failure on stderr."""
    sys.stderr.write("fbc-filter CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from fbcfilter.__version__ import __version__

        sys.stderr.write(f"fbc-filter version: {__version__}\n")
    except ImportError:
        sys.stderr.write("fbc-filter version: <unknown>\n")
    sys.stderr.write("\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m fbcfilter`.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from fbcfilter.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
