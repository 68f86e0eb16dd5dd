"""
Filesystem utilities for fbc-filter.

This module provides safe helpers for reading configuration and catalog
files, discovering catalog documents inside a directory tree, and writing
the filtered catalog atomically. All filesystem errors are normalized to
``FileOperationError``.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Union

from fbcfilter.utils.logger import get_logger
from fbcfilter.exceptions import FileOperationError
from fbcfilter.constants import CATALOG_FILE_EXTENSIONS, MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path, *, must_exist: bool = True) -> Path:
    """Validate and resolve a file path."""
    if must_exist:
        if not path.exists():
            raise FileOperationError(
                f"File not found: {path}",
                file_path=str(path),
                operation="read",
            )
        if not path.is_file():
            raise FileOperationError(
                f"Not a file: {path}",
                file_path=str(path),
                operation="read",
            )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Atomically write text to a file using a temporary file + replace."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
            temp_path = Path(tmp.name)

        temp_path.replace(target)

    except Exception as exc:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Cleaned up temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(file_path: PathLike, content: str) -> None:
    """Safely write text to a file using atomic replacement.

    Args:
        file_path: Destination path; missing parent directories are created.
        content: Text content to write.
    """
    _atomic_write(Path(file_path), content)


def find_catalog_files(
    root: PathLike,
    *,
    extensions: Sequence[str] = CATALOG_FILE_EXTENSIONS,
) -> List[Path]:
    """Return the catalog documents below ``root`` in a stable order.

    A file path is returned as-is. For a directory, every file with one of
    ``extensions`` is collected recursively; entries whose name starts
    with ``.`` (and everything below them) are skipped.

    Raises:
        FileOperationError: ``root`` does not exist.
    """
    path = Path(root)
    if not path.exists():
        raise FileOperationError(
            f"Catalog not found: {path}",
            file_path=str(path),
            operation="discover",
        )

    if path.is_file():
        return [path]

    matches: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(path):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            if Path(filename).suffix.lower() in extensions:
                matches.append(Path(dirpath) / filename)

    logger.debug("Found %d catalog file(s) under %s", len(matches), path)
    return matches
