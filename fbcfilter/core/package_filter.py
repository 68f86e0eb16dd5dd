"""Channel pruning and default channel resolution for a single package."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from fbcfilter.exceptions import (
    DefaultChannelRequiredError,
    DefaultChannelUnresolvableError,
)
from fbcfilter.models.catalog import Package
from fbcfilter.utils.logger import get_logger, logger_warn_sink

logger = get_logger("core.package_filter")

WarnFunc = Callable[[str], None]


class PackageFilter:
    """Keeps a package's allow-listed channels and settles its default channel.

    Args:
        warn: Sink for non-fatal conditions. Defaults to logging at WARNING.
    """

    def __init__(self, warn: Optional[WarnFunc] = None) -> None:
        self.warn: WarnFunc = warn or logger_warn_sink()

    def apply(
        self,
        package: Package,
        channel_names: Sequence[str],
        default_channel_override: Optional[str] = None,
    ) -> None:
        """Prune ``package.channels`` and resolve ``package.default_channel``.

        Channels are pruned first; the default channel is then resolved
        against the channels that survived:

        1. An override naming a surviving channel is adopted.
        2. An override naming a removed channel is ignored with a warning
           if the original default survived, and is an error otherwise.
        3. Without an override, the original default must have survived.

        Args:
            package: Package to filter in place.
            channel_names: Channels to keep; empty keeps every channel.
            default_channel_override: Channel to make the default, if any.

        Raises:
            DefaultChannelUnresolvableError: Both the override and the
                original default channel are gone.
            DefaultChannelRequiredError: The original default channel is
                gone and no override was given.
        """
        if channel_names:
            keep = set(channel_names)
            for name in list(package.channels):
                if name not in keep:
                    logger.debug("Package %s: removing channel %s", package.name, name)
                    del package.channels[name]

        self._resolve_default_channel(package, default_channel_override)

    def _resolve_default_channel(self, package: Package, override: Optional[str]) -> None:
        original = package.default_channel
        original_survives = original in package.channels

        if override:
            if override in package.channels:
                package.default_channel = override
            elif original_survives:
                self.warn(
                    f'specified default channel override "{override}" does not exist, '
                    f'keeping original default channel "{original}" from catalog'
                )
            else:
                raise DefaultChannelUnresolvableError(
                    f"specified default channel override {override!r} does not exist, "
                    f"and original default channel {original!r} does not exist",
                    package=package.name,
                )
            return

        if not original_survives:
            raise DefaultChannelRequiredError(
                f"the default channel {original!r} was filtered out, a new default "
                "channel must be configured in the FilterConfiguration for this package",
                package=package.name,
            )
