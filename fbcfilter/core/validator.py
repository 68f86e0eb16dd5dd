"""Structural validation of a catalog model.

Used after rendering a catalog and again after filtering one. The checks
are structural only (names, references, graph shape); bundle contents are
not inspected.

Per channel, the upgrade graph must satisfy:

1. There is exactly one head.
2. The replaces chain from the head has no cycle.
3. Every bundle is either on the replaces chain from the head or skipped
   by some bundle in the channel (no stranded bundles).
4. The oldest bundle on the chain may replace a bundle that is absent.
"""

from __future__ import annotations

from typing import List, Set

from fbcfilter.core.bundle_chain import BundleChain
from fbcfilter.exceptions import (
    AmbiguousOrMissingHeadError,
    InvalidChannelError,
    InvalidResultingCatalogError,
)
from fbcfilter.models.catalog import Catalog, Channel, Package


def _validate_channel(package: Package, key: str, channel: Channel) -> List[str]:
    where = f"package {package.name!r} channel {key!r}"
    problems: List[str] = []

    if channel.name != key:
        problems.append(f"{where}: channel key does not match channel name {channel.name!r}")
    if channel.package is not package:
        problems.append(f"{where}: channel does not reference its package")
    if not channel.bundles:
        problems.append(f"{where}: channel must contain at least one bundle")
        return problems

    for bundle_key, bundle in channel.bundles.items():
        if bundle.name != bundle_key:
            problems.append(
                f"{where}: bundle key {bundle_key!r} does not match bundle name {bundle.name!r}"
            )

    chain = BundleChain(channel)
    try:
        head = chain.head()
    except AmbiguousOrMissingHeadError as exc:
        problems.append(f"{where}: {exc.message}")
        return problems

    on_chain: Set[str] = set()
    try:
        for bundle in chain.walk(head):
            on_chain.add(bundle.name)
    except InvalidChannelError as exc:
        problems.append(f"{where}: {exc.message}")
        return problems

    skipped: Set[str] = set()
    for bundle in channel.bundles.values():
        skipped.update(bundle.skips)

    stranded = sorted(set(channel.bundles) - on_chain - skipped)
    if stranded:
        problems.append(
            f"{where}: channel contains one or more stranded bundles: {', '.join(stranded)}"
        )
    return problems


def _validate_package(key: str, package: Package) -> List[str]:
    where = f"package {key!r}"
    problems: List[str] = []

    if not package.name:
        problems.append(f"{where}: package name must be set")
    elif package.name != key:
        problems.append(f"{where}: package key does not match package name {package.name!r}")

    if not package.channels:
        problems.append(f"{where}: package must contain at least one channel")
    if not package.default_channel:
        problems.append(f"{where}: default channel must be set")
    elif package.default_channel not in package.channels:
        problems.append(
            f"{where}: default channel {package.default_channel!r} not found in channels list"
        )

    for channel_key, channel in package.channels.items():
        problems.extend(_validate_channel(package, channel_key, channel))
    return problems


def validate_catalog(catalog: Catalog) -> List[str]:
    """Return every structural problem found in ``catalog``.

    Packages and channels are checked in mapping order, so the result is
    deterministic for a given catalog. An empty list means the catalog is
    valid.
    """
    problems: List[str] = []
    for key, package in catalog.packages.items():
        problems.extend(_validate_package(key, package))
    return problems


def ensure_valid(catalog: Catalog) -> None:
    """Raise :class:`InvalidResultingCatalogError` if ``catalog`` is invalid."""
    problems = validate_catalog(catalog)
    if problems:
        raise InvalidResultingCatalogError(
            f"catalog is invalid: {len(problems)} problem(s) found",
            problems=problems,
        )
