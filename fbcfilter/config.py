"""Configuration loading for fbc-filter.

Two kinds of configuration are handled here.

**Filter configuration** (required, YAML or JSON) tells the filter what to
keep::

    kind: FilterConfiguration
    apiVersion: olm.operatorframework.io/v1
    packages:
      - name: foo
        defaultChannel: stable        # optional
        channels:                     # optional; absent keeps all channels
          - name: stable
            versionRange: ">=1.1.0"   # optional; absent keeps all bundles

**Tool settings** (optional, TOML) hold defaults for the command line.
Supported locations:

- ``fbc-filter.toml`` — settings under ``[fbc-filter]`` table
- ``pyproject.toml`` — settings under ``[tool.fbc-filter]`` table

Discovery order:

1. Explicit path from ``--settings`` or ``FBC_FILTER_SETTINGS``
2. ``fbc-filter.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.fbc-filter]`` section

Settings precedence: defaults < settings file < CLI args.

Example (``fbc-filter.toml``)::

    [fbc-filter]
    output_format = "json"
    fail_on_warnings = true
"""

from __future__ import annotations


import tomli as tomllib
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional, Set
from dataclasses import dataclass, field

from fbcfilter.exceptions import ConfigError
from fbcfilter.utils.filesystem import safe_read_file
from fbcfilter.utils.logger import get_logger
from fbcfilter.models.filter_config import (
    ChannelFilterSpec,
    FilterConfiguration,
    PackageFilterSpec,
)
from fbcfilter.constants import (
    DEFAULT_FAIL_ON_WARNINGS,
    DEFAULT_OUTPUT_FORMAT,
    FILTER_CONFIG_API_VERSION,
    FILTER_CONFIG_KIND,
    OUTPUT_FORMATS,
    SETTINGS_FILE_NAME,
    SETTINGS_SECTION,
)

logger = get_logger("config")


# ---------------------------------------------------------------------------
# Filter configuration
# ---------------------------------------------------------------------------

_TOP_LEVEL_KEYS = {"kind", "apiVersion", "packages"}
_PACKAGE_KEYS = {"name", "defaultChannel", "channels"}
_CHANNEL_KEYS = {"name", "versionRange"}


def _log_unknown_keys(data: Dict[str, Any], known: Set[str], *, where: str) -> None:
    """Log keys outside ``known``; they are otherwise ignored."""
    unknown = set(data) - known
    if unknown:
        logger.debug("Ignoring unknown keys in %s: %s", where, ", ".join(sorted(unknown)))


def _expect_str(
    value: Any,
    *,
    option: str,
    config_path: Optional[str],
    required: bool = False,
) -> str:
    if value is None and not required:
        return ""
    if not isinstance(value, str) or (required and not value):
        raise ConfigError(
            f"{option} must be a non-empty string" if required else f"{option} must be a string",
            config_path=config_path,
            option=option,
        )
    return value


def _parse_channel(
    data: Any,
    *,
    where: str,
    config_path: Optional[str],
) -> ChannelFilterSpec:
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be a mapping", config_path=config_path)
    _log_unknown_keys(data, _CHANNEL_KEYS, where=where)

    name = _expect_str(data.get("name"), option=f"{where}.name", config_path=config_path, required=True)
    version_range = _expect_str(
        data.get("versionRange"),
        option=f"{where}.versionRange",
        config_path=config_path,
    )
    return ChannelFilterSpec(name=name, version_range=version_range.strip())


def _parse_package(
    data: Any,
    *,
    where: str,
    config_path: Optional[str],
) -> PackageFilterSpec:
    if not isinstance(data, dict):
        raise ConfigError(f"{where} must be a mapping", config_path=config_path)
    _log_unknown_keys(data, _PACKAGE_KEYS, where=where)

    name = _expect_str(data.get("name"), option=f"{where}.name", config_path=config_path, required=True)
    default_channel = _expect_str(
        data.get("defaultChannel"),
        option=f"{where}.defaultChannel",
        config_path=config_path,
    )

    raw_channels = data.get("channels") or []
    if not isinstance(raw_channels, list):
        raise ConfigError(
            f"{where}.channels must be a list",
            config_path=config_path,
            option=f"{where}.channels",
        )

    channels: List[ChannelFilterSpec] = []
    seen: Set[str] = set()
    for index, raw in enumerate(raw_channels):
        channel = _parse_channel(raw, where=f"{where}.channels[{index}]", config_path=config_path)
        if channel.name in seen:
            raise ConfigError(
                f"Duplicate channel {channel.name!r} in package {name!r}",
                config_path=config_path,
            )
        seen.add(channel.name)
        channels.append(channel)

    return PackageFilterSpec(
        name=name,
        default_channel=default_channel or None,
        channels=channels,
    )


def parse_filter_configuration(
    data: Any,
    *,
    config_path: Optional[str] = None,
) -> FilterConfiguration:
    """Validate a decoded filter configuration document.

    Args:
        data: Decoded YAML/JSON document.
        config_path: Path string for error messages.

    Returns:
        The typed :class:`FilterConfiguration`.

    Raises:
        ConfigError: Wrong ``kind``/``apiVersion``, wrong
            types, or duplicate package/channel names.
    """
    if not isinstance(data, dict):
        raise ConfigError(
            "Filter configuration must be a mapping",
            config_path=config_path,
        )

    kind = data.get("kind")
    api_version = data.get("apiVersion")
    if kind != FILTER_CONFIG_KIND or api_version != FILTER_CONFIG_API_VERSION:
        raise ConfigError(
            f"Invalid configuration file: expected kind {FILTER_CONFIG_KIND} and "
            f"apiVersion {FILTER_CONFIG_API_VERSION}, got {kind}/{api_version}",
            config_path=config_path,
        )

    _log_unknown_keys(data, _TOP_LEVEL_KEYS, where="filter configuration")

    raw_packages = data.get("packages") or []
    if not isinstance(raw_packages, list):
        raise ConfigError(
            "packages must be a list",
            config_path=config_path,
            option="packages",
        )

    packages: List[PackageFilterSpec] = []
    seen: Set[str] = set()
    for index, raw in enumerate(raw_packages):
        package = _parse_package(raw, where=f"packages[{index}]", config_path=config_path)
        if package.name in seen:
            raise ConfigError(
                f"Duplicate package {package.name!r}",
                config_path=config_path,
            )
        seen.add(package.name)
        packages.append(package)

    return FilterConfiguration(packages=packages, kind=kind, api_version=api_version)


def load_filter_configuration(config_path: Path) -> FilterConfiguration:
    """Read and validate a filter configuration file.

    JSON documents are accepted as well, being valid YAML.

    Raises:
        ConfigError: The file is not valid YAML or fails validation.
        FileOperationError: The file cannot be read.
    """
    path = Path(config_path)
    logger.info("Loading filter configuration from %s", path)
    text = safe_read_file(path)

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"Error parsing configuration file: {exc}",
            config_path=str(path),
        ) from exc

    configuration = parse_filter_configuration(data, config_path=str(path))
    logger.debug(
        "Filter configuration lists %d package(s): %s",
        len(configuration.packages),
        ", ".join(configuration.package_names),
    )
    return configuration


# ---------------------------------------------------------------------------
# Tool settings
# ---------------------------------------------------------------------------


@dataclass
class FbcFilterSettings:
    """Parsed and validated fbc-filter tool settings.

    All fields have defaults, so empty settings files are valid.

    Attributes:
        output_format: Default serialization of the filtered catalog
            (``"yaml"`` or ``"json"``).
        fail_on_warnings: Treat any filter warning as a failure; nothing
            is written when a warning was emitted.
        source_path: Path to loaded settings file, or ``None`` if using defaults.
    """

    output_format: str = DEFAULT_OUTPUT_FORMAT
    fail_on_warnings: bool = DEFAULT_FAIL_ON_WARNINGS

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return settings as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "output_format": self.output_format,
            "fail_on_warnings": self.fail_on_warnings,
        }


def discover_settings_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the settings file to load.

    Search order:

    1. ``explicit_path`` (from ``--settings`` or ``FBC_FILTER_SETTINGS``)
    2. ``fbc-filter.toml`` in current directory
    3. ``pyproject.toml`` with ``[tool.fbc-filter]`` section in current directory

    Args:
        explicit_path: Explicit settings path. If provided, must exist.

    Returns:
        Resolved path to settings file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Settings file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit settings: %s", resolved)
        return resolved

    cwd = Path.cwd()

    settings_toml = cwd / SETTINGS_FILE_NAME
    if settings_toml.is_file():
        logger.debug("Found %s: %s", SETTINGS_FILE_NAME, settings_toml)
        return settings_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_settings_section(pyproject_toml):
        logger.debug("Found [tool.%s] in pyproject.toml: %s", SETTINGS_SECTION, pyproject_toml)
        return pyproject_toml

    logger.debug("No settings file found")
    return None


def _pyproject_has_settings_section(path: Path) -> bool:
    """Check if pyproject.toml contains a ``[tool.fbc-filter]`` section.

    Parse errors are treated as "no section" so that an unrelated broken
    pyproject.toml does not stop the tool.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return SETTINGS_SECTION in raw.get("tool", {})


def load_settings(settings_path: Optional[Path] = None) -> FbcFilterSettings:
    """Load and validate fbc-filter tool settings.

    Discovers the settings file (or uses the provided path), parses and
    validates it. Returns defaults if no file is found.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_settings_file(settings_path)

    if resolved is None:
        logger.debug("No settings file found, using defaults")
        return FbcFilterSettings()

    logger.info("Loading settings from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(SETTINGS_SECTION, {})
    else:
        section = raw.get(SETTINGS_SECTION, {})

    if not section:
        logger.debug("Settings file found but no %s section, using defaults", SETTINGS_SECTION)
        return FbcFilterSettings(source_path=resolved)

    settings = _parse_section(section, config_path=str(resolved))
    settings.source_path = resolved

    logger.debug("Loaded settings: %s", settings.to_log_dict())
    return settings


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read settings file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> FbcFilterSettings:
    """Parse and validate the ``[fbc-filter]`` settings table.

    Raises:
        ConfigError: Unknown keys or incorrect types/values.
    """
    settings = FbcFilterSettings()

    known_top = {
        "output_format",
        "fail_on_warnings",
    }

    unknown_top = set(section.keys()) - known_top
    if unknown_top:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown_top))}",
            config_path=config_path,
        )

    if "output_format" in section:
        val = section["output_format"]
        if not isinstance(val, str) or val.lower() not in OUTPUT_FORMATS:
            raise ConfigError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {val!r}",
                config_path=config_path,
                option="output_format",
            )
        settings.output_format = val.lower()

    if "fail_on_warnings" in section:
        val = section["fail_on_warnings"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"fail_on_warnings must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="fail_on_warnings",
            )
        settings.fail_on_warnings = val

    return settings
