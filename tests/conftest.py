from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pytest
import yaml
from semantic_version import Version

from fbcfilter.models.catalog import Bundle, Catalog, Channel, Package

# (name, version) | (name, version, replaces) | (name, version, replaces, skips)
Entry = Union[Tuple[str, str], Tuple[str, str, str], Tuple[str, str, str, Sequence[str]]]


def bundle_name(package: str, version: str) -> str:
    return f"{package}.v{version}"


def bundle_blob(package: str, name: str, version: str) -> Dict[str, Any]:
    return {
        "schema": "olm.bundle",
        "name": name,
        "package": package,
        "image": f"quay.io/example/{name}:latest",
        "properties": [
            {
                "type": "olm.package",
                "value": {"packageName": package, "version": version},
            }
        ],
    }


def make_bundle(
    package: str,
    name: str,
    version: str,
    replaces: str = "",
    skips: Sequence[str] = (),
) -> Bundle:
    return Bundle(
        name=name,
        version=Version(version),
        replaces=replaces,
        skips=list(skips),
        blob=bundle_blob(package, name, version),
    )


def linear_entries(
    package: str,
    versions: Sequence[str],
    skips: Optional[Dict[str, Sequence[str]]] = None,
) -> List[Entry]:
    """Entries for a replaces chain; ``versions`` are oldest first.

    ``skips`` maps a version to the versions it skips.
    """
    skips = skips or {}
    entries: List[Entry] = []
    previous = ""
    for version in versions:
        name = bundle_name(package, version)
        skipped = [bundle_name(package, s) for s in skips.get(version, [])]
        entries.append((name, version, previous, skipped))
        previous = name
    return entries


def make_channel(package: Package, name: str, entries: Sequence[Entry]) -> Channel:
    channel = Channel(name=name)
    for entry in entries:
        bundle_name_, version = entry[0], entry[1]
        replaces = entry[2] if len(entry) > 2 else ""
        skips = entry[3] if len(entry) > 3 else ()
        channel.add_bundle(make_bundle(package.name, bundle_name_, version, replaces, skips))
    package.add_channel(channel)
    return channel


def make_catalog(layout: Dict[str, Dict[str, Any]]) -> Catalog:
    """Build a catalog from a nested description::

        {"foo": {"defaultChannel": "stable", "channels": {"stable": [entries...]}}}
    """
    catalog = Catalog()
    for package_name, description in layout.items():
        package = Package(
            name=package_name,
            default_channel=description.get("defaultChannel", ""),
        )
        for channel_name, entries in description.get("channels", {}).items():
            make_channel(package, channel_name, entries)
        catalog.add_package(package)
    return catalog


def channel_bundle_names(catalog: Catalog, package: str, channel: str) -> List[str]:
    return sorted(catalog.packages[package].channels[channel].bundles)


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def catalog_factory() -> Callable[[Dict[str, Dict[str, Any]]], Catalog]:
    """Return a builder for in-memory catalogs."""
    return make_catalog


@pytest.fixture
def chain_entries() -> Callable[..., List[Entry]]:
    """Return a builder for linear replaces chains."""
    return linear_entries


@pytest.fixture
def bundle_factory() -> Callable[..., Bundle]:
    """Return a builder for single bundles."""
    return make_bundle


@pytest.fixture
def channel_factory() -> Callable[..., Channel]:
    """Return a builder for channels attached to a package."""
    return make_channel


@pytest.fixture
def warnings_seen() -> List[str]:
    """Collect messages passed to a warning sink."""
    return []


def _catalog_documents() -> Dict[str, List[Dict[str, Any]]]:
    foo_versions = ["1.0.0", "1.1.0", "2.0.0", "2.1.0"]
    foo = [
        {
            "schema": "olm.package",
            "name": "foo",
            "defaultChannel": "stable",
            "description": "The foo operator",
        },
        {
            "schema": "olm.channel",
            "name": "stable",
            "package": "foo",
            "entries": [
                {"name": "foo.v1.0.0"},
                {"name": "foo.v1.1.0", "replaces": "foo.v1.0.0"},
                {"name": "foo.v2.0.0", "replaces": "foo.v1.1.0"},
            ],
        },
        {
            "schema": "olm.channel",
            "name": "candidate",
            "package": "foo",
            "entries": [
                {"name": "foo.v2.0.0"},
                {"name": "foo.v2.1.0", "replaces": "foo.v2.0.0"},
            ],
        },
    ]
    foo.extend(bundle_blob("foo", bundle_name("foo", v), v) for v in foo_versions)
    foo.append(
        {
            "schema": "olm.deprecations",
            "package": "foo",
            "entries": [{"reference": {"schema": "olm.bundle", "name": "foo.v1.0.0"}}],
        }
    )

    bar = [
        {"schema": "olm.package", "name": "bar", "defaultChannel": "fast"},
        {
            "schema": "olm.channel",
            "name": "fast",
            "package": "bar",
            "entries": [
                {"name": "bar.v0.1.0"},
                {"name": "bar.v0.2.0", "replaces": "bar.v0.1.0"},
            ],
        },
        bundle_blob("bar", "bar.v0.1.0", "0.1.0"),
        bundle_blob("bar", "bar.v0.2.0", "0.2.0"),
    ]
    return {"foo": foo, "bar": bar}


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """Write a small two-package catalog to disk.

    ``foo`` is stored as a YAML stream, ``bar`` as concatenated JSON.
    """
    root = tmp_path / "catalog"
    documents = _catalog_documents()

    (root / "foo").mkdir(parents=True)
    (root / "foo" / "catalog.yaml").write_text(
        yaml.safe_dump_all(documents["foo"], sort_keys=False),
        encoding="utf-8",
    )

    (root / "bar").mkdir()
    (root / "bar" / "catalog.json").write_text(
        "\n".join(json.dumps(doc, indent=2) for doc in documents["bar"]),
        encoding="utf-8",
    )
    return root


@pytest.fixture
def filter_config_file(tmp_path: Path) -> Callable[[Dict[str, Any]], Path]:
    """Return a writer for FilterConfiguration YAML files."""

    def _write(body: Dict[str, Any], name: str = "filter.yaml") -> Path:
        document = {
            "kind": "FilterConfiguration",
            "apiVersion": "olm.operatorframework.io/v1",
        }
        document.update(body)
        path = tmp_path / name
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        return path

    return _write
