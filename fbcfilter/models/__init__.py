"""
Unified data model exports for fbc-filter.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``fbcfilter.models`` instead of individual submodules.

Example:
    >>> from fbcfilter.models import Catalog, Package, Channel, Bundle
"""

from __future__ import annotations

from fbcfilter.models.catalog import Bundle, Catalog, Channel, Package
from fbcfilter.models.declarative_config import DeclarativeConfig
from fbcfilter.models.filter_config import (
    ChannelFilterSpec,
    FilterConfiguration,
    PackageFilterSpec,
)

__all__ = [
    "Bundle",
    "Catalog",
    "Channel",
    "Package",
    "DeclarativeConfig",
    "ChannelFilterSpec",
    "FilterConfiguration",
    "PackageFilterSpec",
]
