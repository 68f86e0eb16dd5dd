"""
Centralized constants for fbc-filter.

This module defines immutable configuration values used across fbc-filter,
including declarative catalog schemas, filter configuration identifiers,
file patterns, and logging formats. All values are intended to be treated
as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Filter configuration document
# ---------------------------------------------------------------------------

#: Required ``kind`` of a filter configuration document.
FILTER_CONFIG_KIND: Final[str] = "FilterConfiguration"

#: Required ``apiVersion`` of a filter configuration document.
FILTER_CONFIG_API_VERSION: Final[str] = "olm.operatorframework.io/v1"

# ---------------------------------------------------------------------------
# Declarative catalog schemas
# ---------------------------------------------------------------------------

SCHEMA_PACKAGE: Final[str] = "olm.package"
SCHEMA_CHANNEL: Final[str] = "olm.channel"
SCHEMA_BUNDLE: Final[str] = "olm.bundle"

#: Bundle property carrying the package name and bundle version.
PROPERTY_PACKAGE: Final[str] = "olm.package"

#: File extensions read when rendering a catalog directory.
CATALOG_FILE_EXTENSIONS: Final[Sequence[str]] = (".json", ".yaml", ".yml")

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

OUTPUT_FORMAT_YAML: Final[str] = "yaml"
OUTPUT_FORMAT_JSON: Final[str] = "json"

#: Supported serializations of the filtered catalog.
OUTPUT_FORMATS: Final[Sequence[str]] = (OUTPUT_FORMAT_YAML, OUTPUT_FORMAT_JSON)

#: Indentation used for JSON output.
JSON_INDENT: Final[int] = 4

# ---------------------------------------------------------------------------
# Settings defaults
# ---------------------------------------------------------------------------

#: Name of the standalone settings file.
SETTINGS_FILE_NAME: Final[str] = "fbc-filter.toml"

#: Table holding fbc-filter settings (``[tool.<name>]`` in pyproject.toml).
SETTINGS_SECTION: Final[str] = "fbc-filter"

DEFAULT_OUTPUT_FORMAT: Final[str] = OUTPUT_FORMAT_YAML
DEFAULT_FAIL_ON_WARNINGS: Final[bool] = False

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading catalog or config files.
MAX_FILE_SIZE: Final[int] = 256 * 1024 * 1024  # 256 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
