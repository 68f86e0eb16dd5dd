"""Declarative catalog reader for fbc-filter.

Reads a file-based catalog from disk and builds the typed
:class:`~fbcfilter.models.catalog.Catalog` model the filters operate on.

Supported inputs:

- a directory, read recursively (``*.json``, ``*.yaml``, ``*.yml``; hidden
  files and directories skipped; files visited in sorted order)
- a single file

JSON files may contain a stream of concatenated objects, YAML files may
contain several ``---`` separated documents. Every document must be a
mapping with a string ``schema``. ``olm.package``, ``olm.channel`` and
``olm.bundle`` documents are modelled; any other schema is carried through
untouched and written back out after filtering.

Container images and sqlite databases are not supported.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import yaml
from semantic_version import Version

from fbcfilter.constants import PROPERTY_PACKAGE, SCHEMA_BUNDLE, SCHEMA_CHANNEL, SCHEMA_PACKAGE
from fbcfilter.core.validator import validate_catalog
from fbcfilter.core.version_constraint import to_constraint_version
from fbcfilter.exceptions import CatalogParseError, InvalidVersionError
from fbcfilter.models.catalog import Bundle, Catalog, Channel, Package
from fbcfilter.models.declarative_config import Blob, DeclarativeConfig
from fbcfilter.utils.filesystem import PathLike, find_catalog_files, safe_read_file
from fbcfilter.utils.logger import get_logger

logger = get_logger("core.renderer")


# ---------------------------------------------------------------------------
# Reading documents
# ---------------------------------------------------------------------------


def _iter_json_documents(text: str, file_path: str) -> Iterator[Any]:
    decoder = json.JSONDecoder()
    index = 0
    length = len(text)
    while True:
        while index < length and text[index].isspace():
            index += 1
        if index >= length:
            return
        try:
            document, index = decoder.raw_decode(text, index)
        except json.JSONDecodeError as exc:
            raise CatalogParseError(
                f"invalid JSON: {exc}",
                file_path=file_path,
            ) from exc
        yield document


def _iter_yaml_documents(text: str, file_path: str) -> Iterator[Any]:
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as exc:
        raise CatalogParseError(
            f"invalid YAML: {exc}",
            file_path=file_path,
        ) from exc
    for document in documents:
        if document is not None:
            yield document


def _parse_file(path: Path) -> DeclarativeConfig:
    text = safe_read_file(path)
    file_path = str(path)

    if path.suffix.lower() == ".json":
        documents = _iter_json_documents(text, file_path)
    else:
        documents = _iter_yaml_documents(text, file_path)

    dc = DeclarativeConfig()
    for document in documents:
        if not isinstance(document, dict):
            raise CatalogParseError(
                f"expected a mapping, got {type(document).__name__}",
                file_path=file_path,
            )
        schema = document.get("schema")
        if not isinstance(schema, str) or not schema:
            raise CatalogParseError(
                "document is missing a string 'schema' field",
                file_path=file_path,
            )
        dc.add(document)
    return dc


def load_declarative_config(path: PathLike) -> DeclarativeConfig:
    """Read every catalog document below ``path``.

    Raises:
        CatalogParseError: A file is not valid JSON/YAML or holds a
            document without a ``schema``.
        FileOperationError: ``path`` does not exist or cannot be read.
    """
    dc = DeclarativeConfig()
    for file in find_catalog_files(path):
        logger.debug("Reading catalog file %s", file)
        dc.merge(_parse_file(file))

    logger.info(
        "Loaded %d package(s), %d channel(s), %d bundle(s) from %s",
        len(dc.packages),
        len(dc.channels),
        len(dc.bundles),
        path,
    )
    return dc


# ---------------------------------------------------------------------------
# Building the model
# ---------------------------------------------------------------------------


def _require_str(blob: Blob, key: str) -> str:
    value = blob.get(key)
    if not isinstance(value, str) or not value:
        raise CatalogParseError(
            f"{blob.get('schema')} document is missing required field {key!r}",
            schema=blob.get("schema"),
        )
    return value


def _optional_str(blob: Blob, key: str) -> str:
    value = blob.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CatalogParseError(
            f"field {key!r} must be a string, got {type(value).__name__}",
            schema=blob.get("schema"),
        )
    return value


def _bundle_version(blob: Blob) -> Version:
    name = blob.get("name")
    for prop in blob.get("properties") or []:
        if not isinstance(prop, dict) or prop.get("type") != PROPERTY_PACKAGE:
            continue
        value = prop.get("value") or {}
        version = value.get("version") if isinstance(value, dict) else None
        if not isinstance(version, str):
            break
        try:
            return to_constraint_version(version)
        except InvalidVersionError as exc:
            raise CatalogParseError(
                f"bundle {name!r} has an invalid version: {exc.message}",
                schema=SCHEMA_BUNDLE,
            ) from exc

    raise CatalogParseError(
        f"bundle {name!r} has no {PROPERTY_PACKAGE!r} property with a version",
        schema=SCHEMA_BUNDLE,
    )


def _build_packages(dc: DeclarativeConfig, catalog: Catalog) -> None:
    for blob in dc.packages:
        name = _require_str(blob, "name")
        if name in catalog:
            raise CatalogParseError(f"duplicate package {name!r}", schema=SCHEMA_PACKAGE)
        icon = blob.get("icon")
        catalog.add_package(
            Package(
                name=name,
                default_channel=_optional_str(blob, "defaultChannel"),
                description=_optional_str(blob, "description"),
                icon=icon if isinstance(icon, dict) else None,
            )
        )


def _index_bundles(dc: DeclarativeConfig, catalog: Catalog) -> Dict[str, Dict[str, Blob]]:
    index: Dict[str, Dict[str, Blob]] = {name: {} for name in catalog.packages}
    for blob in dc.bundles:
        name = _require_str(blob, "name")
        package = _require_str(blob, "package")
        if package not in index:
            raise CatalogParseError(
                f"bundle {name!r} references unknown package {package!r}",
                schema=SCHEMA_BUNDLE,
            )
        if name in index[package]:
            raise CatalogParseError(
                f"duplicate bundle {name!r} in package {package!r}",
                schema=SCHEMA_BUNDLE,
            )
        index[package][name] = blob
    return index


def _build_channel(blob: Blob, package: Package, bundles: Dict[str, Blob]) -> Channel:
    name = _require_str(blob, "name")
    properties = blob.get("properties") or []
    channel = Channel(name=name, properties=list(properties))

    entries = blob.get("entries") or []
    if not isinstance(entries, list):
        raise CatalogParseError(
            f"channel {name!r} entries must be a list",
            schema=SCHEMA_CHANNEL,
        )

    for entry in entries:
        if not isinstance(entry, dict):
            raise CatalogParseError(
                f"channel {name!r} has a malformed entry: {entry!r}",
                schema=SCHEMA_CHANNEL,
            )
        entry_name = _require_str(entry, "name")
        if entry_name in channel.bundles:
            raise CatalogParseError(
                f"duplicate entry {entry_name!r} in channel {name!r} of package {package.name!r}",
                schema=SCHEMA_CHANNEL,
            )
        bundle_blob = bundles.get(entry_name)
        if bundle_blob is None:
            raise CatalogParseError(
                f"channel {name!r} of package {package.name!r} references "
                f"bundle {entry_name!r} which has no olm.bundle document",
                schema=SCHEMA_CHANNEL,
            )

        skips = entry.get("skips") or []
        if not isinstance(skips, list) or not all(isinstance(s, str) for s in skips):
            raise CatalogParseError(
                f"entry {entry_name!r} in channel {name!r}: skips must be a list of strings",
                schema=SCHEMA_CHANNEL,
            )

        channel.add_bundle(
            Bundle(
                name=entry_name,
                version=_bundle_version(bundle_blob),
                replaces=_optional_str(entry, "replaces"),
                skips=list(skips),
                skip_range=_optional_str(entry, "skipRange"),
                blob=bundle_blob,
            )
        )
    return channel


def convert_to_model(dc: DeclarativeConfig) -> Catalog:
    """Build and validate a :class:`Catalog` from raw documents.

    Raises:
        CatalogParseError: Documents are missing fields, reference unknown
            packages or bundles, are duplicated, or the resulting model is
            structurally invalid.
    """
    catalog = Catalog()
    _build_packages(dc, catalog)
    bundle_index = _index_bundles(dc, catalog)

    for blob in dc.channels:
        package_name = _require_str(blob, "package")
        package = catalog.packages.get(package_name)
        if package is None:
            raise CatalogParseError(
                f"channel {blob.get('name')!r} references unknown package {package_name!r}",
                schema=SCHEMA_CHANNEL,
            )
        channel = _build_channel(blob, package, bundle_index[package_name])
        if channel.name in package.channels:
            raise CatalogParseError(
                f"duplicate channel {channel.name!r} in package {package_name!r}",
                schema=SCHEMA_CHANNEL,
            )
        package.add_channel(channel)

    for package_name, bundles in bundle_index.items():
        in_channels = set()
        for channel in catalog.packages[package_name].channels.values():
            in_channels.update(channel.bundles)
        orphans = sorted(set(bundles) - in_channels)
        if orphans:
            raise CatalogParseError(
                f"package {package_name!r} bundle(s) not found in any channel entries: "
                f"{', '.join(orphans)}",
                schema=SCHEMA_BUNDLE,
            )

    for blob in dc.others:
        package_name = blob.get("package")
        if not package_name:
            catalog.others.append(blob)
        elif package_name in catalog:
            catalog.packages[package_name].others.append(blob)
        else:
            raise CatalogParseError(
                f"{blob.get('schema')} document references unknown package {package_name!r}",
                schema=blob.get("schema"),
            )

    problems = validate_catalog(catalog)
    if problems:
        raise CatalogParseError(f"invalid catalog: {'; '.join(problems)}")
    return catalog


def render_catalog(path: PathLike) -> Catalog:
    """Read the catalog at ``path`` and return its validated model."""
    return convert_to_model(load_declarative_config(path))
