"""Catalog filtering orchestration for fbc-filter.

This module provides the entry point for filtering a whole catalog against
a :class:`~fbcfilter.models.filter_config.FilterConfiguration`. It composes
the per-package and per-channel filters:

1. **Package pruning** — packages not named in the configuration are removed.
2. **PackageFilter** — for each configured package (in configuration
   order), channels not in its allow-list are removed and the default
   channel is resolved.
3. **ChannelFilter** — for each configured channel (in configuration order)
   with a version range, bundles are pruned to the range.
4. **Validation** — the resulting catalog is checked structurally.

Filtering is all-or-nothing: the first fatal error aborts the run. The
catalog is mutated in place and is **not** rolled back, so callers should
discard it when an error is raised.

Typical usage::

    from fbcfilter.core.renderer import render_catalog
    from fbcfilter.config import load_filter_configuration
    from fbcfilter.core.catalog_filter import filter_catalog

    catalog = render_catalog("catalog/")
    configuration = load_filter_configuration("filter.yaml")
    filter_catalog(catalog, configuration, warn=print)
"""

from __future__ import annotations

from typing import Callable, Optional

from fbcfilter.core.channel_filter import ChannelFilter
from fbcfilter.core.package_filter import PackageFilter
from fbcfilter.core.validator import validate_catalog
from fbcfilter.exceptions import FilterError, InvalidResultingCatalogError
from fbcfilter.models.catalog import Catalog, Package
from fbcfilter.models.filter_config import FilterConfiguration, PackageFilterSpec
from fbcfilter.utils.logger import get_logger, logger_warn_sink

logger = get_logger("core.catalog_filter")

WarnFunc = Callable[[str], None]


class CatalogFilter:
    """Filters a catalog in place according to a filter configuration.

    Args:
        warn: Sink for non-fatal conditions, called once per condition in
            detection order. Defaults to logging at WARNING level.

    Example::

        >>> warnings = []
        >>> CatalogFilter(warn=warnings.append).apply(catalog, configuration)
        >>> sorted(catalog.packages)
        ['foo']
    """

    def __init__(self, warn: Optional[WarnFunc] = None) -> None:
        self.warn: WarnFunc = warn or logger_warn_sink()
        self.package_filter = PackageFilter(self.warn)
        self.channel_filter = ChannelFilter(self.warn)

    def apply(self, catalog: Catalog, configuration: FilterConfiguration) -> None:
        """Filter ``catalog`` in place.

        Raises:
            FilterError: Any filter failure; the subclass identifies the
                cause and ``details`` carry the package and channel.
            InvalidResultingCatalogError: The filtered catalog is not
                structurally valid.
        """
        self._remove_unconfigured_packages(catalog, configuration)

        for spec in configuration.packages:
            package = catalog.packages.get(spec.name)
            if package is None:
                self.warn(f'package "{spec.name}" not found in catalog')
                continue
            self._filter_package(package, spec)

        problems = validate_catalog(catalog)
        if problems:
            raise InvalidResultingCatalogError(
                f"filtered catalog is invalid: {'; '.join(problems)}",
                problems=problems,
            )

    @staticmethod
    def _remove_unconfigured_packages(
        catalog: Catalog,
        configuration: FilterConfiguration,
    ) -> None:
        keep = set(configuration.package_names)
        for name in list(catalog.packages):
            if name not in keep:
                logger.debug("Removing package %s", name)
                del catalog.packages[name]

    def _filter_package(self, package: Package, spec: PackageFilterSpec) -> None:
        try:
            self.package_filter.apply(package, spec.channel_names, spec.default_channel)
        except FilterError as exc:
            raise exc.annotate(package=package.name)

        for channel_spec in spec.channels:
            channel = package.channels.get(channel_spec.name)
            if channel is None:
                self.warn(f'channel "{channel_spec.name}" not found in package "{package.name}"')
                continue
            if not channel_spec.version_range:
                continue

            try:
                self.channel_filter.apply(channel, channel_spec.version_range)
            except FilterError as exc:
                raise exc.annotate(package=package.name, channel=channel.name)


def filter_catalog(
    catalog: Catalog,
    configuration: FilterConfiguration,
    warn: Optional[WarnFunc] = None,
) -> Catalog:
    """Filter ``catalog`` in place and return it.

    Convenience wrapper around :class:`CatalogFilter`.
    """
    CatalogFilter(warn).apply(catalog, configuration)
    return catalog
