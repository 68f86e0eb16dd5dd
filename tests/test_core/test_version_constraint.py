from __future__ import annotations

from types import SimpleNamespace

import pytest
from semantic_version import Version

from fbcfilter.core.version_constraint import VersionConstraint, to_constraint_version
from fbcfilter.exceptions import InvalidRangeSyntaxError, InvalidVersionError


@pytest.mark.unit
class TestVersionConstraint:
    """Tests for VersionConstraint range evaluation."""

    @pytest.mark.parametrize(
        "expression, version, expected",
        [
            (">=1.1.0", "1.1.0", True),
            (">=1.1.0", "1.0.9", False),
            ("<2.0.0", "1.9.9", True),
            ("<2.0.0", "2.0.0", False),
            ("=1.2.3", "1.2.3", True),
            ("1.2.3", "1.2.4", False),
            (">= 1.1.0", "1.1.0", True),
            (">= 1.1.0", "1.0.0", False),
            ("!=1.0.0", "1.0.0", False),
            ("!=1.0.0", "1.1.0", True),
            ("=>1.1.0", "1.2.0", True),
            ("=<1.1.0", "1.2.0", False),
            ("v1.2.3", "1.2.3", True),
        ],
        ids=[
            "gte-edge",
            "gte-below",
            "lt-below",
            "lt-edge",
            "eq",
            "bare-exact",
            "spaced-operator-match",
            "spaced-operator-miss",
            "not-equal-miss",
            "not-equal-match",
            "reversed-gte",
            "reversed-lte",
            "v-prefix",
        ],
    )
    def test_comparisons(self, expression: str, version: str, expected: bool) -> None:
        """Test single comparator expressions."""
        assert VersionConstraint(expression).satisfies(version) is expected

    @pytest.mark.parametrize(
        "expression",
        [
            ">=1.1.0 <2.0.0",
            ">=1.1.0, <2.0.0",
            ">=1.1.0,<2.0.0",
            "  >=1.1.0    <2.0.0  ",
            ">= 1.1.0, < 2.0.0",
        ],
        ids=["space", "comma-space", "comma", "extra-whitespace", "spaced-operators"],
    )
    def test_conjunction_separators(self, expression: str) -> None:
        """Test whitespace and commas both join comparators with AND."""
        constraint = VersionConstraint(expression)

        assert constraint.satisfies("1.1.0")
        assert constraint.satisfies("1.9.0")
        assert not constraint.satisfies("2.0.0")
        assert not constraint.satisfies("1.0.0")

    def test_caret_range(self) -> None:
        """Test caret ranges allow changes below the major version."""
        constraint = VersionConstraint("^1.2.0")

        assert constraint.satisfies("1.2.0")
        assert constraint.satisfies("1.9.3")
        assert not constraint.satisfies("2.0.0")
        assert not constraint.satisfies("1.1.9")

    def test_tilde_range(self) -> None:
        """Test tilde ranges allow patch-level changes only."""
        constraint = VersionConstraint("~1.2.0")

        assert constraint.satisfies("1.2.5")
        assert not constraint.satisfies("1.3.0")

    def test_x_range_and_disjunction(self) -> None:
        """Test x-ranges combined with '||'."""
        constraint = VersionConstraint("1.2.x || >=2.0.0")

        assert constraint.satisfies("1.2.0")
        assert constraint.satisfies("1.2.7")
        assert constraint.satisfies("3.1.0")
        assert not constraint.satisfies("1.5.0")
        assert not constraint.satisfies("1.0.0")

    def test_hyphen_range_is_inclusive(self) -> None:
        """Test hyphen ranges include both ends."""
        constraint = VersionConstraint("1.0.0 - 1.4.0")

        assert constraint.satisfies("1.0.0")
        assert constraint.satisfies("1.4.0")
        assert not constraint.satisfies("1.5.0")

    def test_prerelease_on_same_patch(self) -> None:
        """Test a pre-release lower bound admits later pre-releases of that patch."""
        constraint = VersionConstraint(">=2.0.0-rc.0")

        assert constraint.satisfies("2.0.0-rc.1")
        assert constraint.satisfies("2.0.0")

    def test_exclusion_inside_conjunction(self) -> None:
        """Test '!=' removes one version from an otherwise open range."""
        constraint = VersionConstraint(">=1.0.0, != 1.1.0")

        assert constraint.satisfies("1.0.0")
        assert not constraint.satisfies("1.1.0")
        assert constraint.satisfies("2.0.0")

    def test_tilde_arrow_alias(self) -> None:
        assert VersionConstraint("~> 1.2.0").satisfies("1.2.9")
        assert not VersionConstraint("~>1.2.0").satisfies("1.3.0")

    def test_hyphen_range_with_partial_upper_bound(self) -> None:
        """Test a partial upper bound covers its whole minor line."""
        constraint = VersionConstraint("1.0.0 - 1.4")

        assert constraint.satisfies("1.4.9")
        assert not constraint.satisfies("1.5.0")

    def test_prerelease_lower_bound_crosses_patch_boundaries(self) -> None:
        """Test a pre-release comparator admits pre-releases of later versions."""
        constraint = VersionConstraint(">=1.0.0-0")

        assert constraint.satisfies("1.0.0")
        assert constraint.satisfies("2.0.0-rc.1")
        assert constraint.satisfies("1.0.0-alpha")

    def test_prerelease_needs_prerelease_comparator(self) -> None:
        """Test a pre-release version fails comparators without a pre-release."""
        assert not VersionConstraint(">=1.0.0").satisfies("2.0.0-rc.1")
        assert not VersionConstraint(">=1.0.0-0 <3.0.0").satisfies("2.0.0-rc.1")
        assert VersionConstraint(">=1.0.0-0 <3.0.0-0").satisfies("2.0.0-rc.1")
        assert VersionConstraint("<1.0.0 || >=2.0.0-0").satisfies("2.0.0-rc.1")

    def test_unsatisfiable_range_parses(self) -> None:
        """Test a contradictory range is valid syntax that matches nothing."""
        constraint = VersionConstraint(">=2.0.0 <2.0.0")

        for version in ("1.0.0", "2.0.0", "3.0.0"):
            assert not constraint.satisfies(version)

    def test_accepts_version_objects(self) -> None:
        """Test satisfies accepts Version instances as well as strings."""
        constraint = VersionConstraint(">=1.0.0")

        assert constraint.satisfies(Version("1.0.0"))
        assert Version("1.5.0") in constraint

    @pytest.mark.parametrize(
        "expression",
        [
            "",
            "   ",
            "not-a-range",
            ">=1.0.0 || banana",
            ">>1.0.0",
            ">=1.0.0 ||",
            "1.0.0 -",
            "!=*",
        ],
        ids=[
            "empty",
            "blank",
            "word",
            "bad-group",
            "bad-operator",
            "empty-alternative",
            "open-hyphen",
            "excluded-wildcard",
        ],
    )
    def test_invalid_syntax_raises(self, expression: str) -> None:
        """Test malformed expressions raise InvalidRangeSyntaxError."""
        with pytest.raises(InvalidRangeSyntaxError) as exc_info:
            VersionConstraint(expression)

        assert exc_info.value.version_range == expression

    def test_none_expression_raises(self) -> None:
        """Test None is rejected like an empty expression."""
        with pytest.raises(InvalidRangeSyntaxError, match="expression is empty"):
            VersionConstraint(None)  # type: ignore[arg-type]

    def test_str_and_repr(self) -> None:
        """Test the original expression text is preserved."""
        constraint = VersionConstraint(">=1.1.0, <2.0.0")

        assert str(constraint) == ">=1.1.0, <2.0.0"
        assert repr(constraint) == "VersionConstraint('>=1.1.0, <2.0.0')"


@pytest.mark.unit
class TestToConstraintVersion:
    """Tests for to_constraint_version conversion."""

    def test_from_string(self) -> None:
        """Test string versions keep pre-release and build identifiers."""
        result = to_constraint_version("1.2.3-rc.1+build.5")

        assert (result.major, result.minor, result.patch) == (1, 2, 3)
        assert result.prerelease == ("rc", "1")
        assert result.build == ("build", "5")

    def test_from_version_returns_equal_version(self) -> None:
        """Test Version instances convert to an equal Version."""
        original = Version("2.0.0-alpha.1")

        assert to_constraint_version(original) == original

    def test_from_duck_typed_object_with_joined_identifiers(self) -> None:
        """Test identifiers given as dot-joined strings are split again."""
        version = SimpleNamespace(major=1, minor=0, patch=4, prerelease="beta.2", build="")

        result = to_constraint_version(version)

        assert str(result) == "1.0.4-beta.2"
        assert result.build == ()

    def test_from_duck_typed_object_with_sequences(self) -> None:
        """Test identifiers given as sequences are preserved in order."""
        version = SimpleNamespace(
            major=3, minor=1, patch=0, prerelease=["rc", 2], build=("sha", "abc")
        )

        result = to_constraint_version(version)

        assert str(result) == "3.1.0-rc.2+sha.abc"

    def test_invalid_string_raises(self) -> None:
        """Test a non-semver string raises InvalidVersionError."""
        with pytest.raises(InvalidVersionError) as exc_info:
            to_constraint_version("1.2")

        assert exc_info.value.version == "1.2"

    def test_object_without_components_raises(self) -> None:
        """Test objects lacking major/minor/patch raise InvalidVersionError."""
        with pytest.raises(InvalidVersionError, match="cannot convert"):
            to_constraint_version(object())
