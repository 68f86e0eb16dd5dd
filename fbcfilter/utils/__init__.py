"""
Utility helpers for fbc-filter.

This package provides reusable utilities used across fbc-filter, including:

- Console output helpers (Rich-based, stderr)
- Logging configuration and retrieval
- Filesystem safety helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from fbcfilter.utils.filesystem import (
    find_catalog_files,
    safe_read_file,
    safe_write_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from fbcfilter.utils.logger import (
    disable_logging,
    get_logger,
    logger_warn_sink,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from fbcfilter.utils.console import (
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "logger_warn_sink",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "find_catalog_files",
]
