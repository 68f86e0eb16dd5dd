"""Bundle pruning for a single channel.

A channel filter keeps the bundles of a channel that fall inside a version
range, while keeping the channel a single connected upgrade graph:

1. Starting at the channel head, walk ``replaces`` to the first bundle that
   is inside the range itself or skips a bundle inside the range. That
   bundle becomes the new head.
2. Keep walking until reaching a bundle from which no bundle inside the
   range can be reached (through itself, its skips, or anything it
   replaces). That bundle and everything older is dropped.
3. Everything in between is kept, together with every in-range bundle that
   a kept bundle skips. Bundles kept although they are outside the range
   are reported through the warning sink.

Example, range ``">=1.1.0"`` over ``2.0.0 -> 1.1.0 -> 1.0.0``::

    head 2.0.0 (in range), tail boundary 1.0.0 => keeps {2.0.0, 1.1.0}
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from fbcfilter.core.bundle_chain import BundleChain
from fbcfilter.core.version_constraint import VersionConstraint
from fbcfilter.exceptions import (
    AmbiguousOrMissingHeadError,
    InvalidChannelError,
    InvalidRangeSyntaxError,
    NoBundlesInRangeError,
)
from fbcfilter.models.catalog import Bundle, Channel
from fbcfilter.utils.logger import get_logger, logger_warn_sink

logger = get_logger("core.channel_filter")

WarnFunc = Callable[[str], None]


class ChannelFilter:
    """Prunes a channel's bundles to a version range.

    Args:
        warn: Sink receiving one message per bundle retained outside the
            range. Defaults to logging at WARNING level.
    """

    def __init__(self, warn: Optional[WarnFunc] = None) -> None:
        self.warn: WarnFunc = warn or logger_warn_sink()

    def apply(self, channel: Channel, version_range: str) -> None:
        """Replace ``channel.bundles`` with the bundles retained for ``version_range``.

        Raises:
            InvalidChannelError: The channel head cannot be resolved or the
                replaces chain is cyclic.
            InvalidRangeSyntaxError: ``version_range`` cannot be parsed.
            NoBundlesInRangeError: No bundle of the channel is in range.
        """
        package_name = channel.package_name or None
        chain = BundleChain(channel)

        try:
            head = chain.head()
        except AmbiguousOrMissingHeadError as exc:
            raise InvalidChannelError(
                f"error getting head of channel {channel.name!r}: {exc.message}",
                package=package_name,
                channel=channel.name,
            ) from exc

        try:
            constraint = VersionConstraint(version_range)
        except InvalidRangeSyntaxError as exc:
            raise exc.annotate(package=package_name, channel=channel.name)

        retained_head = self._find_retained_head(chain, head, constraint)
        retained = self._collect(chain, retained_head, constraint, channel)

        if not retained:
            raise NoBundlesInRangeError(
                f"no bundles in channel {channel.name!r} for package "
                f"{channel.package_name!r} matched the version range {version_range!r}",
                package=package_name,
                channel=channel.name,
                version_range=version_range,
            )

        logger.debug(
            "Channel %s/%s: keeping %d of %d bundle(s) for range %r",
            channel.package_name,
            channel.name,
            len(retained),
            len(channel.bundles),
            version_range,
        )
        channel.bundles = retained

    @staticmethod
    def _find_retained_head(
        chain: BundleChain,
        head: Bundle,
        constraint: VersionConstraint,
    ) -> Optional[Bundle]:
        for bundle in chain.walk(head):
            if chain.is_or_skips_into_range(bundle, constraint):
                return bundle
        return None

    def _collect(
        self,
        chain: BundleChain,
        retained_head: Optional[Bundle],
        constraint: VersionConstraint,
        channel: Channel,
    ) -> Dict[str, Bundle]:
        retained: Dict[str, Bundle] = {}
        if retained_head is None:
            return retained

        for bundle, reaches_range in chain.walk_with_range_reachability(retained_head, constraint):
            # First bundle with nothing in range at or below it: exclusive tail.
            if not reaches_range:
                break

            if not constraint.satisfies(bundle.version):
                self.warn(
                    f'including bundle "{bundle.name}" with version "{bundle.version}" '
                    f'in channel "{channel.name}" for package "{channel.package_name}": '
                    f'it falls outside the specified range of "{constraint}" but is '
                    "required to ensure inclusion of all bundles in the range"
                )
            retained[bundle.name] = bundle

            for target in chain.skip_targets(bundle):
                if constraint.satisfies(target.version):
                    retained[target.name] = target

        return retained
