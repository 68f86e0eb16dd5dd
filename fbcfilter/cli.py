"""
Command-line interface for fbc-filter.

This module provides the main CLI entry point and handles global options,
settings loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from fbcfilter.config import load_settings
from fbcfilter.__version__ import __version__
from fbcfilter.context import FbcFilterContext
from fbcfilter.exceptions import ConfigError, FbcFilterError
from fbcfilter.utils.logger import get_logger, setup_logging
from fbcfilter.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--settings",
    "-s",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to fbc-filter settings file (TOML).",
    envvar="FBC_FILTER_SETTINGS",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="FBC_FILTER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="fbc-filter",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    settings: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """fbc-filter — prune file-based operator catalogs.

    \b
    Available commands:
      fbc-filter filter            Filter a catalog by package, channel and version

    \b
    Examples:
      fbc-filter filter -c filter.yaml ./catalog
      fbc-filter filter -c filter.yaml ./catalog -o json
      fbc-filter -v filter -c filter.yaml ./catalog --summary

    Use ``fbc-filter COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_settings = load_settings(settings)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    fbc_ctx = FbcFilterContext()
    fbc_ctx.settings_path = settings or loaded_settings.source_path
    fbc_ctx.color = color
    fbc_ctx.verbose = verbose
    fbc_ctx.settings = loaded_settings
    ctx.obj = fbc_ctx

    logger.debug("fbc-filter v%s", __version__)
    logger.debug("Settings path: %s", fbc_ctx.settings_path)
    logger.debug("Settings: %s", loaded_settings.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from fbcfilter.commands.filter import filter_command  # noqa: E402

cli.add_command(filter_command)


def main() -> int:
    """Main entry point for the fbc-filter CLI.

    Returns:
        Exit code:
            0   Success
            1   Filter, configuration, catalog or unexpected error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.Abort:
        print_warning("Operation cancelled by user")
        return 130

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except FbcFilterError as exc:
        print_error(str(exc))
        logger.debug(
            "FbcFilterError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
