"""
Custom exception hierarchy for fbc-filter.

This module defines structured exception types used across fbc-filter.
All exceptions inherit from :class:`FbcFilterError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Errors raised while filtering a catalog derive from :class:`FilterError`.
They are all terminal for the current filter run; the catalog being
filtered may already be partially mutated when one is raised.
"""

from __future__ import annotations

from typing import Any, List, Mapping, MutableMapping, Optional, Sequence


class FbcFilterError(Exception):
    """Base exception for all fbc-filter errors.

    All fbc-filter-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


class ConfigError(FbcFilterError):
    """Raised when a settings file or filter configuration is invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file involved.
        option: Name of the offending option, if known.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class FileOperationError(FbcFilterError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/discover).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class CatalogParseError(FbcFilterError):
    """Raised when a declarative catalog cannot be read into the model.

    Args:
        message: Error description.
        file_path: Catalog file the offending document came from.
        schema: Schema of the offending document, if known.
    """

    __slots__ = ("file_path", "schema")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)
        _add_if(details, "schema", schema)

        super().__init__(message, details)

        self.file_path = file_path
        self.schema = schema


class InvalidVersionError(FbcFilterError):
    """Raised when a bundle version is not a valid semantic version."""

    __slots__ = ("version",)

    def __init__(self, message: str, *, version: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "version", version)

        super().__init__(message, details)

        self.version = version


# ---------------------------------------------------------------------------
# Filter errors
# ---------------------------------------------------------------------------


class FilterError(FbcFilterError):
    """Base class for errors raised while filtering a catalog.

    Args:
        message: Error description.
        package: Package being filtered.
        channel: Channel being filtered.
        version_range: Version range expression in effect.
    """

    __slots__ = ("package", "channel", "version_range")

    def __init__(
        self,
        message: str,
        *,
        package: Optional[str] = None,
        channel: Optional[str] = None,
        version_range: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "package", package)
        _add_if(details, "channel", channel)
        _add_if(details, "range", version_range)

        super().__init__(message, details)

        self.package = package
        self.channel = channel
        self.version_range = version_range

    def annotate(
        self,
        *,
        package: Optional[str] = None,
        channel: Optional[str] = None,
    ) -> "FilterError":
        """Attach package/channel context that was not known at raise time.

        Existing values are never overwritten. Returns ``self`` so callers
        can ``raise exc.annotate(...)``.
        """
        if package is not None and self.package is None:
            self.package = package
            self.details["package"] = package
        if channel is not None and self.channel is None:
            self.channel = channel
            self.details["channel"] = channel
        return self


class InvalidRangeSyntaxError(FilterError):
    """Raised when a version range expression cannot be parsed."""


class AmbiguousOrMissingHeadError(FilterError):
    """Raised when a channel has no head or more than one head."""


class InvalidChannelError(FilterError):
    """Raised when a channel's update graph cannot be traversed."""


class NoBundlesInRangeError(FilterError):
    """Raised when no bundle of a channel falls inside the version range."""


class DefaultChannelUnresolvableError(FilterError):
    """Raised when both the default channel override and the original
    default channel were filtered out."""


class DefaultChannelRequiredError(FilterError):
    """Raised when the original default channel was filtered out and no
    override was configured."""


class InvalidResultingCatalogError(FilterError):
    """Raised when the filtered catalog fails structural validation.

    Args:
        message: Error description.
        problems: Individual validation failures, in detection order.
    """

    __slots__ = ("problems",)

    def __init__(
        self,
        message: str,
        *,
        problems: Optional[Sequence[str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.problems: List[str] = list(problems or [])
        if self.problems:
            self.details["problems"] = "; ".join(self.problems)
