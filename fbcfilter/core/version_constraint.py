"""Version range evaluation for fbc-filter.

Channel filters are written as semantic version ranges::

    ">=1.1.0", ">= 1.1.0"     comparison (space after the operator allowed)
    "=>1.1.0", "=<2.0.0"      reversed operator spellings
    "!=1.1.0"                 exclusion
    ">=1.1.0 <2.0.0"          conjunction (whitespace)
    ">=1.1.0, <2.0.0"         conjunction (comma)
    "^1.2.0", "~1.2.0"        caret / tilde ranges (``~>`` is an alias of ``~``)
    "1.2.x || >=2.0.0"        x-ranges and disjunction
    "1.0.0 - 1.4.0"           hyphen ranges, inclusive on both ends

The expression is split into ``||`` alternatives, each alternative into
comparators, and every comparator is parsed and matched by
:class:`semantic_version.SimpleSpec`. A pre-release version only satisfies
a comparator whose own version carries a pre-release; given that, it is
ordered normally against the comparator, across major.minor.patch
boundaries (``>=1.0.0-0`` admits ``2.0.0-rc.1``, ``>=1.0.0`` does not).

Bundle versions may arrive in any representation exposing
``major``/``minor``/``patch``/``prerelease``/``build`` (or as a plain
string); :func:`to_constraint_version` rebuilds them component-wise as a
:class:`semantic_version.Version` so that pre-release and build identifiers
survive the conversion unchanged.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Union

from semantic_version import SimpleSpec, Version

from fbcfilter.exceptions import InvalidRangeSyntaxError, InvalidVersionError

VersionLike = Union[Version, str, Any]

_OPERATOR_SPACING = re.compile(r"(>=|=>|<=|=<|!=|~>|>|<|=|\^|~)\s+")
_COMPARATOR = re.compile(r"^(?P<op>=>|=<|~>|>=|<=|!=|==|>|<|=|\^|~)?[vV]?(?P<version>.*)$")
_VERSION_PARTS = re.compile(r"^(?P<core>[^-+]*)(?P<rest>.*)$")
_OPERATOR_ALIASES = {"=>": ">=", "=<": "<=", "~>": "~"}
_WILDCARDS = ("x", "X")


def _join_identifiers(parts: Optional[Union[str, Iterable[Any]]]) -> str:
    """Return pre-release or build identifiers as one dot-joined string."""
    if parts is None:
        return ""
    if isinstance(parts, str):
        return parts
    return ".".join(str(p) for p in parts)


def _split_identifiers(joined: str) -> tuple:
    return tuple(joined.split(".")) if joined else ()


def to_constraint_version(version: VersionLike) -> Version:
    """Convert a model version to the evaluator's representation.

    Args:
        version: A :class:`semantic_version.Version`, a version string, or
            any object with ``major``, ``minor``, ``patch``, ``prerelease``
            and ``build`` attributes (identifiers as a sequence or as a
            dot-joined string).

    Returns:
        An equivalent :class:`semantic_version.Version`.

    Raises:
        InvalidVersionError: The version is not a valid semantic version.

    Example::

        >>> str(to_constraint_version("1.2.3-rc.1+build.5"))
        '1.2.3-rc.1+build.5'
    """
    if isinstance(version, str):
        try:
            return Version(version)
        except ValueError as exc:
            raise InvalidVersionError(
                f"invalid semantic version {version!r}: {exc}",
                version=version,
            ) from exc

    try:
        prerelease = _join_identifiers(getattr(version, "prerelease", None))
        build = _join_identifiers(getattr(version, "build", None))
        return Version(
            major=int(version.major),
            minor=int(version.minor),
            patch=int(version.patch),
            prerelease=_split_identifiers(prerelease),
            build=_split_identifiers(build),
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise InvalidVersionError(
            f"cannot convert {version!r} to a semantic version: {exc}",
            version=str(version),
        ) from exc


class _Comparator:
    """One comparator of a range, e.g. ``>=1.1.0`` or ``1.2.x``."""

    __slots__ = ("has_prerelease", "_spec")

    def __init__(self, text: str) -> None:
        match = _COMPARATOR.match(text)
        operator = match.group("op") or ""
        operator = _OPERATOR_ALIASES.get(operator, operator)
        parts = _VERSION_PARTS.match(match.group("version"))
        core = ".".join(
            "*" if part in _WILDCARDS else part for part in parts.group("core").split(".")
        )
        rest = parts.group("rest")
        self.has_prerelease = rest.startswith("-")
        self._spec = SimpleSpec(f"{operator}{core}{rest}")

    def matches(self, version: Version) -> bool:
        if version.prerelease and not self.has_prerelease:
            return False
        return self._spec.match(version)


def _parse_alternative(alternative: str) -> List[_Comparator]:
    tokens = alternative.replace(",", " ").split()
    if not tokens:
        raise ValueError("empty comparator set")

    comparators: List[_Comparator] = []
    index = 0
    while index < len(tokens):
        if index + 1 < len(tokens) and tokens[index + 1] == "-":
            if index + 2 >= len(tokens):
                raise ValueError(f"hyphen range after {tokens[index]!r} has no upper bound")
            comparators.append(_Comparator(f">={tokens[index]}"))
            comparators.append(_Comparator(f"<={tokens[index + 2]}"))
            index += 3
        else:
            comparators.append(_Comparator(tokens[index]))
            index += 1
    return comparators


def _parse_expression(expression: str) -> List[List[_Comparator]]:
    collapsed = _OPERATOR_SPACING.sub(r"\1", expression)
    return [_parse_alternative(alternative) for alternative in collapsed.split("||")]


class VersionConstraint:
    """A parsed version range.

    Args:
        expression: Range expression (see module docstring).

    Raises:
        InvalidRangeSyntaxError: The expression is empty or cannot be parsed.

    Example::

        >>> c = VersionConstraint(">=1.1.0 <2.0.0")
        >>> c.satisfies("1.5.0"), c.satisfies("2.0.0")
        (True, False)
    """

    __slots__ = ("expression", "_alternatives")

    def __init__(self, expression: str) -> None:
        self.expression = expression

        if expression is None or not str(expression).strip():
            raise InvalidRangeSyntaxError(
                "invalid version range: expression is empty",
                version_range=expression,
            )

        try:
            self._alternatives = _parse_expression(expression)
        except (TypeError, ValueError) as exc:
            raise InvalidRangeSyntaxError(
                f"invalid version range {expression!r}: {exc}",
                version_range=expression,
            ) from exc

    def satisfies(self, version: VersionLike) -> bool:
        """Return ``True`` if ``version`` lies inside the range."""
        candidate = to_constraint_version(version)
        return any(
            all(comparator.matches(candidate) for comparator in alternative)
            for alternative in self._alternatives
        )

    def __contains__(self, version: VersionLike) -> bool:
        return self.satisfies(version)

    def __str__(self) -> str:
        return self.expression

    def __repr__(self) -> str:
        return f"VersionConstraint({self.expression!r})"
