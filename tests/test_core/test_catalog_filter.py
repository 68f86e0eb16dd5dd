from __future__ import annotations

import logging
from typing import Callable, List

import pytest

from fbcfilter.core.bundle_chain import BundleChain
from fbcfilter.core.catalog_filter import CatalogFilter, filter_catalog
from fbcfilter.core.validator import validate_catalog
from fbcfilter.core.version_constraint import VersionConstraint
from fbcfilter.exceptions import (
    DefaultChannelRequiredError,
    FilterError,
    InvalidResultingCatalogError,
    NoBundlesInRangeError,
)
from fbcfilter.models.catalog import Catalog
from fbcfilter.models.filter_config import (
    ChannelFilterSpec,
    FilterConfiguration,
    PackageFilterSpec,
)


def _config(*packages: PackageFilterSpec) -> FilterConfiguration:
    return FilterConfiguration(packages=list(packages))


@pytest.fixture
def catalog(catalog_factory: Callable, chain_entries: Callable) -> Catalog:
    """Catalog with 'foo' (stable, alpha) and 'bar' (fast)."""
    return catalog_factory(
        {
            "foo": {
                "defaultChannel": "stable",
                "channels": {
                    "stable": chain_entries("foo", ["1.0.0", "1.1.0", "2.0.0"]),
                    "alpha": chain_entries("foo", ["2.0.0", "2.1.0"]),
                },
            },
            "bar": {
                "defaultChannel": "fast",
                "channels": {"fast": chain_entries("bar", ["0.1.0", "0.2.0"])},
            },
        }
    )


@pytest.fixture
def catalog_filter(warnings_seen: List[str]) -> CatalogFilter:
    return CatalogFilter(warn=warnings_seen.append)


@pytest.mark.unit
class TestCatalogFilterScenarios:
    """End-to-end filtering of in-memory catalogs."""

    def test_channel_allow_list_keeps_default(
        self,
        catalog_factory: Callable,
        chain_entries: Callable,
        catalog_filter: CatalogFilter,
        warnings_seen: List[str],
    ) -> None:
        """Test keeping only the default channel without an override succeeds."""
        catalog = catalog_factory(
            {
                "foo": {
                    "defaultChannel": "stable",
                    "channels": {
                        "stable": chain_entries("foo", ["1.0.0", "2.0.0"]),
                        "alpha": chain_entries("foo", ["3.0.0-alpha.1"]),
                    },
                }
            }
        )

        catalog_filter.apply(
            catalog,
            _config(PackageFilterSpec(name="foo", channels=[ChannelFilterSpec(name="stable")])),
        )

        foo = catalog.packages["foo"]
        assert list(foo.channels) == ["stable"]
        assert foo.default_channel == "stable"
        assert sorted(foo.channels["stable"].bundles) == ["foo.v1.0.0", "foo.v2.0.0"]
        assert warnings_seen == []

    def test_lower_bound_range(
        self,
        catalog: Catalog,
        catalog_filter: CatalogFilter,
        warnings_seen: List[str],
    ) -> None:
        """Test '>=1.1.0' keeps v1.1.0 and v2.0.0 only."""
        catalog_filter.apply(
            catalog,
            _config(
                PackageFilterSpec(
                    name="foo",
                    channels=[ChannelFilterSpec(name="stable", version_range=">=1.1.0")],
                )
            ),
        )

        stable = catalog.packages["foo"].channels["stable"]
        assert sorted(stable.bundles) == ["foo.v1.1.0", "foo.v2.0.0"]
        assert warnings_seen == []

    def test_unsatisfiable_range_fails(self, catalog: Catalog, catalog_filter: CatalogFilter) -> None:
        """Test an unsatisfiable range names package, channel and range."""
        with pytest.raises(NoBundlesInRangeError) as exc_info:
            catalog_filter.apply(
                catalog,
                _config(
                    PackageFilterSpec(
                        name="foo",
                        channels=[ChannelFilterSpec(name="stable", version_range=">=2.0.0 <2.0.0")],
                    )
                ),
            )

        details = exc_info.value.details
        assert details["package"] == "foo"
        assert details["channel"] == "stable"
        assert details["range"] == ">=2.0.0 <2.0.0"

    def test_override_for_removed_channel_keeps_original(
        self,
        catalog: Catalog,
        catalog_filter: CatalogFilter,
        warnings_seen: List[str],
    ) -> None:
        """Test an override naming a pruned channel warns once and keeps the default."""
        catalog_filter.apply(
            catalog,
            _config(
                PackageFilterSpec(
                    name="foo",
                    default_channel="alpha",
                    channels=[ChannelFilterSpec(name="stable")],
                )
            ),
        )

        assert catalog.packages["foo"].default_channel == "stable"
        assert len(warnings_seen) == 1
        assert '"alpha"' in warnings_seen[0]

    def test_skip_target_retained_beside_connecting_bundle(
        self,
        catalog_factory: Callable,
        catalog_filter: CatalogFilter,
        warnings_seen: List[str],
    ) -> None:
        """Test an in-range skip target is kept without a warning while the
        out-of-range bundle skipping it is kept with one."""
        catalog = catalog_factory(
            {
                "foo": {
                    "defaultChannel": "stable",
                    "channels": {
                        "stable": [
                            ("foo.v1.0.0", "1.0.0"),
                            ("foo.v1.2.0", "1.2.0"),
                            ("foo.v1.5.0", "1.5.0", "foo.v1.0.0", ["foo.v1.2.0"]),
                            ("foo.v2.0.0", "2.0.0", "foo.v1.5.0"),
                        ]
                    },
                }
            }
        )

        catalog_filter.apply(
            catalog,
            _config(
                PackageFilterSpec(
                    name="foo",
                    channels=[ChannelFilterSpec(name="stable", version_range="1.2.x || >=2.0.0")],
                )
            ),
        )

        stable = catalog.packages["foo"].channels["stable"]
        assert sorted(stable.bundles) == ["foo.v1.2.0", "foo.v1.5.0", "foo.v2.0.0"]
        assert len(warnings_seen) == 1
        assert '"foo.v1.5.0"' in warnings_seen[0]
        assert "foo.v1.2.0" not in warnings_seen[0]


@pytest.mark.unit
class TestCatalogFilterBehaviour:
    """Tests for package selection, warnings and error context."""

    def test_unconfigured_packages_are_removed(
        self, catalog: Catalog, catalog_filter: CatalogFilter
    ) -> None:
        catalog_filter.apply(catalog, _config(PackageFilterSpec(name="bar")))

        assert list(catalog.packages) == ["bar"]

    def test_empty_configuration_empties_catalog(
        self, catalog: Catalog, catalog_filter: CatalogFilter
    ) -> None:
        catalog_filter.apply(catalog, _config())

        assert len(catalog) == 0

    def test_no_ranges_is_identity(
        self, catalog: Catalog, catalog_filter: CatalogFilter, warnings_seen: List[str]
    ) -> None:
        """Test listing every package without channels changes nothing."""
        before = {
            (p.name, c.name): sorted(c.bundles)
            for p in catalog
            for c in p.channels.values()
        }

        catalog_filter.apply(
            catalog,
            _config(PackageFilterSpec(name="foo"), PackageFilterSpec(name="bar")),
        )

        after = {
            (p.name, c.name): sorted(c.bundles)
            for p in catalog
            for c in p.channels.values()
        }
        assert after == before
        assert warnings_seen == []

    def test_channel_without_range_keeps_all_bundles(
        self, catalog: Catalog, catalog_filter: CatalogFilter
    ) -> None:
        catalog_filter.apply(
            catalog,
            _config(
                PackageFilterSpec(
                    name="foo",
                    channels=[
                        ChannelFilterSpec(name="stable"),
                        ChannelFilterSpec(name="alpha", version_range=">=2.1.0"),
                    ],
                )
            ),
        )

        foo = catalog.packages["foo"]
        assert len(foo.channels["stable"].bundles) == 3
        assert sorted(foo.channels["alpha"].bundles) == ["foo.v2.1.0"]

    def test_missing_package_and_channel_warn_in_configuration_order(
        self, catalog: Catalog, catalog_filter: CatalogFilter, warnings_seen: List[str]
    ) -> None:
        """Test absent packages/channels are warnings, reported in config order."""
        catalog_filter.apply(
            catalog,
            _config(
                PackageFilterSpec(name="missing"),
                PackageFilterSpec(
                    name="foo",
                    channels=[ChannelFilterSpec(name="stable"), ChannelFilterSpec(name="nightly")],
                ),
                PackageFilterSpec(name="also-missing"),
            ),
        )

        assert warnings_seen == [
            'package "missing" not found in catalog',
            'channel "nightly" not found in package "foo"',
            'package "also-missing" not found in catalog',
        ]
        assert list(catalog.packages) == ["foo"]

    def test_package_error_is_annotated_with_package(
        self, catalog: Catalog, catalog_filter: CatalogFilter
    ) -> None:
        with pytest.raises(DefaultChannelRequiredError) as exc_info:
            catalog_filter.apply(
                catalog,
                _config(PackageFilterSpec(name="foo", channels=[ChannelFilterSpec(name="alpha")])),
            )

        assert exc_info.value.details["package"] == "foo"
        assert isinstance(exc_info.value, FilterError)

    def test_first_error_aborts(
        self, catalog: Catalog, catalog_filter: CatalogFilter, warnings_seen: List[str]
    ) -> None:
        """Test later packages are not processed after a fatal error."""
        with pytest.raises(NoBundlesInRangeError):
            catalog_filter.apply(
                catalog,
                _config(
                    PackageFilterSpec(
                        name="foo",
                        channels=[ChannelFilterSpec(name="stable", version_range=">=9.0.0")],
                    ),
                    PackageFilterSpec(name="missing"),
                ),
            )

        assert warnings_seen == []

    def test_invalid_result_raises(
        self, catalog_factory: Callable, catalog_filter: CatalogFilter
    ) -> None:
        """Test a channel left with two heads fails validation."""
        catalog = catalog_factory(
            {
                "foo": {
                    "defaultChannel": "stable",
                    "channels": {
                        "stable": [
                            ("foo.v1.0.0", "1.0.0"),
                            ("foo.v2.0.0", "2.0.0", "foo.v1.0.0"),
                            ("foo.v3.0.0", "3.0.0", "foo.v0.1.0"),
                        ]
                    },
                }
            }
        )

        with pytest.raises(InvalidResultingCatalogError) as exc_info:
            catalog_filter.apply(catalog, _config(PackageFilterSpec(name="foo")))

        assert len(exc_info.value.problems) == 1
        assert "multiple channel heads" in exc_info.value.problems[0]
        assert str(exc_info.value).startswith("filtered catalog is invalid: ")


@pytest.mark.unit
class TestCatalogFilterProperties:
    """Invariants that hold for any successful filter run."""

    @pytest.fixture
    def branching_catalog(self, catalog_factory: Callable) -> Catalog:
        return catalog_factory(
            {
                "foo": {
                    "defaultChannel": "stable",
                    "channels": {
                        "stable": [
                            ("foo.v0.9.0", "0.9.0"),
                            ("foo.v1.0.0", "1.0.0", "foo.v0.9.0"),
                            ("foo.v1.1.0", "1.1.0"),
                            ("foo.v1.2.0", "1.2.0", "foo.v1.0.0", ["foo.v1.1.0"]),
                            ("foo.v1.3.0", "1.3.0"),
                            ("foo.v2.0.0", "2.0.0", "foo.v1.2.0", ["foo.v1.3.0"]),
                            ("foo.v2.1.0", "2.1.0", "foo.v2.0.0"),
                            ("foo.v3.0.0", "3.0.0", "foo.v2.1.0"),
                        ]
                    },
                }
            }
        )

    @pytest.mark.parametrize(
        "version_range",
        [">=1.1.0 <2.1.0", "1.1.x || 2.1.x", "<1.3.0", ">=0.9.0", "1.3.0", "~2.0.0"],
    )
    def test_result_is_valid_and_covers_reachable_range(
        self,
        branching_catalog: Catalog,
        catalog_filter: CatalogFilter,
        warnings_seen: List[str],
        version_range: str,
    ) -> None:
        """Test every run leaves one head, keeps each reachable in-range bundle,
        and warns exactly for the kept bundles outside the range."""
        original = dict(branching_catalog.packages["foo"].channels["stable"].bundles)
        constraint = VersionConstraint(version_range)

        filter_catalog(
            branching_catalog,
            _config(
                PackageFilterSpec(
                    name="foo",
                    channels=[ChannelFilterSpec(name="stable", version_range=version_range)],
                )
            ),
            warn=catalog_filter.warn,
        )

        assert validate_catalog(branching_catalog) == []
        stable = branching_catalog.packages["foo"].channels["stable"]
        BundleChain(stable).head()

        kept_in_range = {n for n, b in stable.bundles.items() if constraint.satisfies(b.version)}
        all_in_range = {n for n, b in original.items() if constraint.satisfies(b.version)}
        assert kept_in_range == all_in_range

        out_of_range = {n for n, b in stable.bundles.items() if not constraint.satisfies(b.version)}
        warned = {n for n in original if any(f'"{n}"' in w for w in warnings_seen)}
        assert warned == out_of_range
        assert len(warnings_seen) == len(out_of_range)


@pytest.mark.unit
def test_filter_catalog_logs_warnings_by_default(
    catalog: Catalog,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test filter_catalog returns the catalog and logs warnings without a sink."""
    monkeypatch.setattr(logging.getLogger("fbcfilter"), "propagate", True)

    with caplog.at_level(logging.WARNING, logger="fbcfilter.filter"):
        result = filter_catalog(catalog, _config(PackageFilterSpec(name="ghost")))

    assert result is catalog
    assert len(result) == 0
    assert 'package "ghost" not found in catalog' in caplog.text
