"""
Shared context object for fbc-filter CLI commands.

This module defines the global Click context used to share settings
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from fbcfilter.config import FbcFilterSettings


class FbcFilterContext:
    """Global context object for fbc-filter CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        settings_path: Path to the settings file, if one was loaded.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        settings: Loaded tool settings, or ``None`` before loading.
    """

    __slots__ = ("settings_path", "verbose", "color", "settings")

    def __init__(self) -> None:
        self.settings_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.settings: Optional[FbcFilterSettings] = None

    def get_settings(self) -> FbcFilterSettings:
        """Return the loaded settings, or defaults if none were loaded."""
        return self.settings if self.settings is not None else FbcFilterSettings()


#: Click decorator for injecting :class:`FbcFilterContext` into commands.
pass_context = click.make_pass_decorator(FbcFilterContext, ensure=True)
