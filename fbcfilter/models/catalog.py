"""
Catalog data model for fbc-filter.

A :class:`Catalog` maps package names to :class:`Package` objects; a
package maps channel names to :class:`Channel` objects; a channel maps
bundle names to :class:`Bundle` objects. Edges between bundles
(``replaces`` and ``skips``) are stored as bundle *names* and resolved
through the owning channel's ``bundles`` mapping, never as object
references.

Filtering only ever removes entries from these mappings. Bundle objects
themselves are treated as immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from semantic_version import Version


@dataclass(eq=False)
class Bundle:
    """A single operator bundle as seen from one channel.

    Attributes:
        name: Bundle name, unique within its channel.
        version: Semantic version of the bundle.
        replaces: Name of the bundle this one upgrades from, or ``""``.
        skips: Names of bundles this one can upgrade directly from.
            Names that do not resolve within the channel are ignored.
        skip_range: Raw ``skipRange`` of the channel entry, carried through.
        blob: The original ``olm.bundle`` document, written back verbatim.
    """

    name: str
    version: Version
    replaces: str = ""
    skips: List[str] = field(default_factory=list)
    skip_range: str = ""
    blob: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __repr__(self) -> str:
        return f"Bundle(name={self.name!r}, version='{self.version}', replaces={self.replaces!r})"


@dataclass(eq=False)
class Channel:
    """An upgrade graph of bundles within a package."""

    name: str
    package: Optional["Package"] = field(default=None, repr=False)
    bundles: Dict[str, Bundle] = field(default_factory=dict)
    properties: List[Dict[str, Any]] = field(default_factory=list, repr=False)

    @property
    def package_name(self) -> str:
        """Name of the owning package, or ``""`` when detached."""
        return self.package.name if self.package is not None else ""

    def add_bundle(self, bundle: Bundle) -> None:
        self.bundles[bundle.name] = bundle


@dataclass(eq=False)
class Package:
    """An operator package and its channels.

    Attributes:
        name: Package name, unique within the catalog.
        default_channel: Name of the channel clients follow by default.
        channels: Channels keyed by name.
        description: Optional package description.
        icon: Optional icon mapping (``base64data`` / ``mediatype``).
        others: Documents of unknown schema that belong to this package.
    """

    name: str
    default_channel: str = ""
    channels: Dict[str, Channel] = field(default_factory=dict)
    description: str = ""
    icon: Optional[Dict[str, Any]] = field(default=None, repr=False)
    others: List[Dict[str, Any]] = field(default_factory=list, repr=False)

    def add_channel(self, channel: Channel) -> None:
        """Attach ``channel`` to this package, setting its back-reference."""
        channel.package = self
        self.channels[channel.name] = channel


@dataclass(eq=False)
class Catalog:
    """A set of packages rendered from a declarative catalog.

    Attributes:
        packages: Packages keyed by name, in rendering order.
        others: Documents of unknown schema with no owning package.
    """

    packages: Dict[str, Package] = field(default_factory=dict)
    others: List[Dict[str, Any]] = field(default_factory=list, repr=False)

    def add_package(self, package: Package) -> None:
        self.packages[package.name] = package

    def __contains__(self, name: object) -> bool:
        return name in self.packages

    def __iter__(self) -> Iterator[Package]:
        return iter(list(self.packages.values()))

    def __len__(self) -> int:
        return len(self.packages)
