"""Read-only traversal of a channel's upgrade graph.

Bundles in a channel form a chain through their ``replaces`` edges, newest
first, with ``skips`` edges as shortcuts. The *head* of a channel is the
one bundle that nothing else in the channel replaces or skips.

All edges are stored as bundle names and resolved on demand against the
channel's ``bundles`` mapping, so a :class:`BundleChain` always reflects
the channel's current contents.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set, Tuple

from fbcfilter.core.version_constraint import VersionConstraint
from fbcfilter.exceptions import AmbiguousOrMissingHeadError, InvalidChannelError
from fbcfilter.models.catalog import Bundle, Channel


class BundleChain:
    """Traversal helper over one channel.

    Args:
        channel: Channel whose bundles are traversed. Never mutated.
    """

    __slots__ = ("channel",)

    def __init__(self, channel: Channel) -> None:
        self.channel = channel

    @property
    def _bundles(self) -> Dict[str, Bundle]:
        return self.channel.bundles

    def head(self) -> Bundle:
        """Return the bundle no other bundle replaces or skips.

        Raises:
            AmbiguousOrMissingHeadError: There are zero or several such bundles.
        """
        incoming: Set[str] = set()
        for bundle in self._bundles.values():
            if bundle.replaces:
                incoming.add(bundle.replaces)
            incoming.update(bundle.skips)

        heads = [b for b in self._bundles.values() if b.name not in incoming]

        if not heads:
            raise AmbiguousOrMissingHeadError(
                "no channel head found in graph",
                package=self.channel.package_name or None,
                channel=self.channel.name,
            )
        if len(heads) > 1:
            names = ", ".join(sorted(b.name for b in heads))
            raise AmbiguousOrMissingHeadError(
                f"multiple channel heads found in graph: {names}",
                package=self.channel.package_name or None,
                channel=self.channel.name,
            )
        return heads[0]

    def resolve(self, name: str) -> Optional[Bundle]:
        """Look up a bundle by name; unknown or empty names give ``None``."""
        if not name:
            return None
        return self._bundles.get(name)

    def predecessor_of(self, bundle: Bundle) -> Optional[Bundle]:
        """Return the bundle ``bundle`` replaces, if it is in the channel."""
        return self.resolve(bundle.replaces)

    def skip_targets(self, bundle: Bundle) -> List[Bundle]:
        """Return the resolvable bundles ``bundle`` skips, in listed order."""
        targets = []
        for name in bundle.skips:
            target = self.resolve(name)
            if target is not None:
                targets.append(target)
        return targets

    def walk(self, start: Optional[Bundle]) -> Iterator[Bundle]:
        """Yield ``start`` and then each predecessor along ``replaces``.

        Raises:
            InvalidChannelError: The replaces chain loops back on itself.
        """
        seen: Set[str] = set()
        current = start
        while current is not None:
            if current.name in seen:
                raise InvalidChannelError(
                    f"detected cycle in replaces chain at bundle {current.name!r}",
                    package=self.channel.package_name or None,
                    channel=self.channel.name,
                )
            seen.add(current.name)
            yield current
            current = self.predecessor_of(current)

    def is_or_skips_into_range(self, bundle: Bundle, constraint: VersionConstraint) -> bool:
        """True if ``bundle`` or one of its skip-targets satisfies ``constraint``."""
        if constraint.satisfies(bundle.version):
            return True
        return any(constraint.satisfies(t.version) for t in self.skip_targets(bundle))

    def is_or_descends_into_range(self, bundle: Bundle, constraint: VersionConstraint) -> bool:
        """True if ``bundle``, a skip-target, or anything it replaces
        (transitively) satisfies ``constraint``."""
        return any(self.is_or_skips_into_range(b, constraint) for b in self.walk(bundle))

    def walk_with_range_reachability(
        self, start: Optional[Bundle], constraint: VersionConstraint
    ) -> List[Tuple[Bundle, bool]]:
        """Walk from ``start`` pairing each bundle with
        :meth:`is_or_descends_into_range`, answered in one pass from the tail up."""
        path = list(self.walk(start))
        reachable: List[bool] = []
        found = False
        for bundle in reversed(path):
            found = found or self.is_or_skips_into_range(bundle, constraint)
            reachable.append(found)
        reachable.reverse()
        return list(zip(path, reachable))
