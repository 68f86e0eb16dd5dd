"""Declarative catalog writer for fbc-filter.

Turns a (filtered) :class:`~fbcfilter.models.catalog.Catalog` back into
catalog documents and serializes them as a YAML or JSON stream. Output is
deterministic: packages, channels and channel entries are sorted by name,
and documents are grouped per package (package, channels, bundles, other
documents).

A bundle retained in several channels is written once. Bundles removed
from every channel are not written at all.
"""

from __future__ import annotations

import json
from typing import Dict, TextIO

import yaml

from fbcfilter.constants import (
    JSON_INDENT,
    OUTPUT_FORMAT_JSON,
    OUTPUT_FORMAT_YAML,
    OUTPUT_FORMATS,
    SCHEMA_CHANNEL,
    SCHEMA_PACKAGE,
)
from fbcfilter.models.catalog import Catalog, Channel, Package
from fbcfilter.models.declarative_config import Blob, DeclarativeConfig


def _package_blob(package: Package) -> Blob:
    blob: Blob = {"schema": SCHEMA_PACKAGE, "name": package.name}
    if package.default_channel:
        blob["defaultChannel"] = package.default_channel
    if package.icon:
        blob["icon"] = package.icon
    if package.description:
        blob["description"] = package.description
    return blob


def _channel_blob(package: Package, channel: Channel) -> Blob:
    entries = []
    for bundle in sorted(channel.bundles.values(), key=lambda b: b.name):
        entry: Blob = {"name": bundle.name}
        if bundle.replaces:
            entry["replaces"] = bundle.replaces
        if bundle.skips:
            entry["skips"] = list(bundle.skips)
        if bundle.skip_range:
            entry["skipRange"] = bundle.skip_range
        entries.append(entry)

    blob: Blob = {
        "schema": SCHEMA_CHANNEL,
        "name": channel.name,
        "package": package.name,
        "entries": entries,
    }
    if channel.properties:
        blob["properties"] = list(channel.properties)
    return blob


def convert_from_model(catalog: Catalog) -> DeclarativeConfig:
    """Return the catalog documents describing ``catalog``."""
    dc = DeclarativeConfig()

    for package in sorted(catalog, key=lambda p: p.name):
        dc.packages.append(_package_blob(package))

        bundle_blobs: Dict[str, Blob] = {}
        for channel in sorted(package.channels.values(), key=lambda c: c.name):
            dc.channels.append(_channel_blob(package, channel))
            for bundle in channel.bundles.values():
                bundle_blobs.setdefault(bundle.name, bundle.blob)

        dc.bundles.extend(bundle_blobs[name] for name in sorted(bundle_blobs))
        dc.others.extend(package.others)

    dc.others.extend(catalog.others)
    return dc


def write_yaml(dc: DeclarativeConfig, stream: TextIO) -> None:
    """Write every document as a ``---`` separated YAML stream."""
    for blob in dc.iter_package_blobs():
        stream.write("---\n")
        yaml.safe_dump(
            blob,
            stream,
            sort_keys=True,
            default_flow_style=False,
            allow_unicode=True,
        )


def write_json(dc: DeclarativeConfig, stream: TextIO) -> None:
    """Write every document as an indented JSON object, one after another."""
    for blob in dc.iter_package_blobs():
        json.dump(blob, stream, indent=JSON_INDENT, ensure_ascii=False)
        stream.write("\n")


def write_catalog(catalog: Catalog, stream: TextIO, output_format: str = OUTPUT_FORMAT_YAML) -> None:
    """Serialize ``catalog`` to ``stream`` as ``"yaml"`` or ``"json"``.

    Raises:
        ValueError: ``output_format`` is not supported.
    """
    fmt = output_format.lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(
            f"invalid output format {output_format!r}; expected one of {', '.join(OUTPUT_FORMATS)}"
        )

    dc = convert_from_model(catalog)
    if fmt == OUTPUT_FORMAT_JSON:
        write_json(dc, stream)
    else:
        write_yaml(dc, stream)
