"""
fbc-filter — prune file-based operator catalogs

fbc-filter reads a declarative operator catalog, keeps only the packages,
channels and bundle version ranges named in a ``FilterConfiguration``
document, and writes the result back out as YAML or JSON.

Filtering never breaks a channel's upgrade graph: when the bundles inside a
requested range are only reachable through bundles outside it, those
bundles are retained as well and a warning is emitted for each of them.
"""

from __future__ import annotations

from fbcfilter.__version__ import __version__
from fbcfilter.core.catalog_filter import CatalogFilter, filter_catalog
from fbcfilter.core.renderer import render_catalog
from fbcfilter.core.writer import write_catalog
from fbcfilter.config import load_filter_configuration

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "fbc-filter Contributors"
__license__ = "Apache-2.0"
__description__ = "Filter file-based operator catalogs by package, channel and version range."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
    "CatalogFilter",
    "filter_catalog",
    "render_catalog",
    "write_catalog",
    "load_filter_configuration",
]
