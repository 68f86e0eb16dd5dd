"""
Filter configuration data models for fbc-filter.

These types mirror the ``FilterConfiguration`` document::

    kind: FilterConfiguration
    apiVersion: olm.operatorframework.io/v1
    packages:
      - name: foo
        defaultChannel: stable
        channels:
          - name: stable
            versionRange: ">=1.1.0 <2.0.0"

List order is preserved everywhere; it determines the order in which
packages and channels are processed and therefore the order of warnings.
Parsing and validation live in :mod:`fbcfilter.config`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from fbcfilter.constants import FILTER_CONFIG_API_VERSION, FILTER_CONFIG_KIND


@dataclass(frozen=True)
class ChannelFilterSpec:
    """Channel to keep, optionally restricted to a version range.

    An empty ``version_range`` keeps every bundle of the channel.
    """

    name: str
    version_range: str = ""


@dataclass(frozen=True)
class PackageFilterSpec:
    """Package to keep, with its channel allow-list.

    Attributes:
        name: Package name.
        default_channel: Default channel override, or ``None``.
        channels: Channels to keep. Empty keeps all channels.
    """

    name: str
    default_channel: Optional[str] = None
    channels: List[ChannelFilterSpec] = field(default_factory=list)

    @property
    def channel_names(self) -> List[str]:
        return [c.name for c in self.channels]


@dataclass(frozen=True)
class FilterConfiguration:
    """A parsed ``FilterConfiguration`` document."""

    packages: List[PackageFilterSpec] = field(default_factory=list)
    kind: str = FILTER_CONFIG_KIND
    api_version: str = FILTER_CONFIG_API_VERSION

    @property
    def package_names(self) -> List[str]:
        return [p.name for p in self.packages]
