"""Filter command implementation for fbc-filter.

Reads a file-based catalog, filters it against a ``FilterConfiguration``
document, and writes the result as YAML or JSON.

The command orchestrates four steps:

1. **load_filter_configuration** — parses and validates the filter document.
2. **render_catalog** — reads the catalog directory/file into the model.
3. **CatalogFilter** — prunes packages, channels and bundles; warnings are
   printed to stderr as they are emitted.
4. **write_catalog** — serializes the filtered model to stdout or a file.

Typical usage::

    # Keep only what filter.yaml lists, as YAML on stdout
    $ fbc-filter filter --config filter.yaml ./catalog > filtered.yaml

    # JSON, written atomically to a file, with a summary table
    $ fbc-filter filter -c filter.yaml ./catalog -o json --output-file out.json --summary
"""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from fbcfilter.config import load_filter_configuration
from fbcfilter.constants import OUTPUT_FORMATS
from fbcfilter.context import FbcFilterContext, pass_context
from fbcfilter.core import BundleChain, CatalogFilter, render_catalog, write_catalog
from fbcfilter.exceptions import FbcFilterError
from fbcfilter.models import Catalog
from fbcfilter.utils import (
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
    safe_write_file,
)

logger = get_logger("commands.filter")


class WarningRecorder:
    """Warning sink that prints each message immediately and remembers it."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)
        print_warning(message)

    @property
    def count(self) -> int:
        return len(self.messages)


@click.command("filter")
@click.argument(
    "catalog",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--config",
    "-c",
    "config_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the FilterConfiguration file.",
)
@click.option(
    "--output",
    "-o",
    "output_format",
    type=click.Choice(list(OUTPUT_FORMATS), case_sensitive=False),
    default=None,
    help="Output format (defaults to the settings file, then yaml).",
)
@click.option(
    "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the filtered catalog to this file instead of stdout.",
)
@click.option(
    "--summary",
    is_flag=True,
    help="Print a table of the retained packages and channels to stderr.",
)
@pass_context
def filter_command(
    ctx: FbcFilterContext,
    catalog: Path,
    config_file: Path,
    output_format: Optional[str],
    output_file: Optional[Path],
    summary: bool,
) -> None:
    """Filter CATALOG (a directory or file) by package, channel and version range.

    Packages and channels not listed in the configuration are removed.
    Channels with a ``versionRange`` keep only the bundles in that range,
    plus any bundles needed to keep the channel's upgrade graph connected;
    a warning is printed for each of those.

    Exits:
        0 on success, 1 if filtering fails (or warnings were emitted and
        ``fail_on_warnings`` is set).
    """
    settings = ctx.get_settings()
    fmt = (output_format or settings.output_format).lower()
    recorder = WarningRecorder()

    try:
        filtered = _run_filter(catalog, config_file, recorder)
    except FbcFilterError as e:
        print_error(f"error filtering input: {e}")
        logger.debug("Filter failed", exc_info=True)
        sys.exit(1)

    if settings.fail_on_warnings and recorder.count:
        print_error(
            f"{recorder.count} warning(s) emitted and fail_on_warnings is set; "
            "no output written"
        )
        sys.exit(1)

    buffer = io.StringIO()
    write_catalog(filtered, buffer, fmt)

    try:
        if output_file is not None:
            safe_write_file(output_file, buffer.getvalue())
            print_success(f"Filtered catalog written to {output_file}")
        else:
            click.echo(buffer.getvalue(), nl=False)
    except FbcFilterError as e:
        print_error(f"error writing output: {e}")
        sys.exit(1)

    if summary:
        _display_summary(filtered)


def _run_filter(catalog_path: Path, config_file: Path, warn: WarningRecorder) -> Catalog:
    """Load the configuration, render the catalog and filter it."""
    configuration = load_filter_configuration(config_file)

    logger.info("Rendering catalog %s...", catalog_path)
    catalog = render_catalog(catalog_path)
    logger.info("Catalog has %d package(s)", len(catalog))

    CatalogFilter(warn=warn).apply(catalog, configuration)
    logger.info(
        "Filtering kept %d package(s) with %d warning(s)",
        len(catalog),
        warn.count,
    )
    return catalog


def _summary_rows(catalog: Catalog) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for package in sorted(catalog, key=lambda p: p.name):
        for channel in sorted(package.channels.values(), key=lambda c: c.name):
            head = BundleChain(channel).head()
            rows.append(
                {
                    "Package": package.name,
                    "Channel": channel.name,
                    "Default": "yes" if channel.name == package.default_channel else "",
                    "Head": f"{head.name} ({head.version})",
                    "Bundles": len(channel.bundles),
                }
            )
    return rows


def _display_summary(catalog: Catalog) -> None:
    """Print a table of retained packages/channels to stderr."""
    rows = _summary_rows(catalog)
    if not rows:
        print_warning("Filtered catalog is empty")
        return

    print_table(
        rows,
        headers=["Package", "Channel", "Default", "Head", "Bundles"],
        title="Filtered Catalog",
        column_styles={
            "Package": {"style": "bold cyan", "no_wrap": True},
            "Bundles": {"justify": "right"},
        },
    )
