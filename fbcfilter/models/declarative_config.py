"""
Raw declarative catalog documents for fbc-filter.

A :class:`DeclarativeConfig` is the untyped, on-disk view of a catalog: the
list of JSON/YAML documents grouped by ``schema``. It sits between the files
on disk and the typed :mod:`fbcfilter.models.catalog` model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from fbcfilter.constants import SCHEMA_BUNDLE, SCHEMA_CHANNEL, SCHEMA_PACKAGE

Blob = Dict[str, Any]


@dataclass
class DeclarativeConfig:
    """Catalog documents grouped by schema, in reading order."""

    packages: List[Blob] = field(default_factory=list)
    channels: List[Blob] = field(default_factory=list)
    bundles: List[Blob] = field(default_factory=list)
    others: List[Blob] = field(default_factory=list)

    def add(self, blob: Blob) -> None:
        """Append ``blob`` to the list matching its ``schema``."""
        schema = blob.get("schema")
        if schema == SCHEMA_PACKAGE:
            self.packages.append(blob)
        elif schema == SCHEMA_CHANNEL:
            self.channels.append(blob)
        elif schema == SCHEMA_BUNDLE:
            self.bundles.append(blob)
        else:
            self.others.append(blob)

    def merge(self, other: "DeclarativeConfig") -> None:
        self.packages.extend(other.packages)
        self.channels.extend(other.channels)
        self.bundles.extend(other.bundles)
        self.others.extend(other.others)

    def iter_package_blobs(self) -> Iterator[Blob]:
        """Yield all documents grouped by package.

        For each ``olm.package`` document (in list order) this yields the
        package, then its channels, bundles and other documents. Documents
        whose package is unknown follow at the end.
        """
        package_names = [p.get("name") for p in self.packages]
        known = set(package_names)

        for package in self.packages:
            name = package.get("name")
            yield package
            for group in (self.channels, self.bundles, self.others):
                for blob in group:
                    if blob.get("package") == name:
                        yield blob

        for group in (self.channels, self.bundles, self.others):
            for blob in group:
                if blob.get("package") not in known:
                    yield blob

    def __len__(self) -> int:
        return len(self.packages) + len(self.channels) + len(self.bundles) + len(self.others)
