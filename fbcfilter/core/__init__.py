"""
Core functionality exports for fbc-filter.

This module provides convenient access to the core subsystems of fbc-filter.
Importing from here keeps user-facing imports clean and stable:

    from fbcfilter.core import CatalogFilter, render_catalog
"""

from __future__ import annotations

from fbcfilter.core.bundle_chain import BundleChain
from fbcfilter.core.catalog_filter import CatalogFilter, filter_catalog
from fbcfilter.core.channel_filter import ChannelFilter
from fbcfilter.core.package_filter import PackageFilter
from fbcfilter.core.renderer import convert_to_model, load_declarative_config, render_catalog
from fbcfilter.core.validator import ensure_valid, validate_catalog
from fbcfilter.core.version_constraint import VersionConstraint, to_constraint_version
from fbcfilter.core.writer import convert_from_model, write_catalog, write_json, write_yaml

__all__ = [
    "BundleChain",
    "CatalogFilter",
    "ChannelFilter",
    "PackageFilter",
    "VersionConstraint",
    "filter_catalog",
    "to_constraint_version",
    "render_catalog",
    "load_declarative_config",
    "convert_to_model",
    "convert_from_model",
    "write_catalog",
    "write_json",
    "write_yaml",
    "validate_catalog",
    "ensure_valid",
]
