"""Filesystem helpers for cogmark."""

from __future__ import annotations

import os
import stat
import sys
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .config import CogConfig
from .constants import MAX_FILE_SIZE_ENV_VAR, STDIO_PATH

DEFAULT_MAX_FILE_SIZE = CogConfig().max_file_size


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed input size.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["COGMARK_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    env_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if env_value is None:
        return default

    try:
        max_size = int(env_value)
    except ValueError as error:
        error_message = (
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {env_value} (expected positive integer)"
        )
        raise ValueError(error_message) from error

    if max_size <= 0:
        error_message = f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {max_size}."
        raise ValueError(error_message)

    return max_size


def collect_file_stat(filepath: Path, follow_symlinks: bool = True) -> os.stat_result:
    """Return stat information for a regular file.

    Args:
        filepath: Path to the file.
        follow_symlinks: When False, a symlink is rejected instead of followed.

    Raises:
        IOError: If the path is inaccessible, a rejected symlink, or not a
            regular file.
    """
    try:
        stat_result = os.stat(filepath, follow_symlinks=follow_symlinks)
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

    if stat.S_ISLNK(stat_result.st_mode):
        error_message = f"Symlinks cannot be replaced in place: {filepath}."
        raise IOError(error_message)

    if not stat.S_ISREG(stat_result.st_mode):
        error_message = f"{filepath} is not a regular file."
        raise IOError(error_message)

    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    """Guard against files that exceed the configured maximum size.

    Raises:
        IOError: If `stat_result.st_size` exceeds `max_size`.
    """
    if stat_result.st_size > max_size:
        error_message = f"{filepath} exceeds the maximum allowed size of {max_size} bytes."
        raise IOError(error_message)


def ensure_file_unchanged(
    expected_stat: os.stat_result, current_stat: os.stat_result, filepath: Path
):
    """Detect changes between two filesystem snapshots.

    Raises:
        IOError: If inode, device, size, or modification time differ.

    Examples:
        ensure_file_unchanged(expected_stat, current_stat, filepath)
    """
    fingerprint_before = (
        getattr(expected_stat, "st_ino", None),
        getattr(expected_stat, "st_dev", None),
        expected_stat.st_size,
        expected_stat.st_mtime_ns,
    )
    fingerprint_after = (
        getattr(current_stat, "st_ino", None),
        getattr(current_stat, "st_dev", None),
        current_stat.st_size,
        current_stat.st_mtime_ns,
    )

    if fingerprint_before != fingerprint_after:
        error_message = f"{filepath} changed during processing; refusing to overwrite."
        raise IOError(error_message)


def safe_read(filepath: Path) -> TextIO:
    """Open a file for reading with consistent error handling.

    Raises:
        IOError: If the path is missing, inaccessible, or not a file.
    """
    try:
        return open(filepath, "r", encoding="UTF-8")
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


def read_document(source: str, max_file_size: int = DEFAULT_MAX_FILE_SIZE) -> str:
    """Read a document from a file, or from standard input when `source` is ``-``.

    Args:
        source: Path to the document, or ``-`` for standard input.
        max_file_size: Maximum allowed file size in bytes.

    Returns:
        str: Document text.

    Raises:
        IOError: If the file is missing, too large, not a regular file, or not
            valid UTF-8.

    Examples:
        text = read_document("README.md")
        text = read_document("-")
    """
    if source == STDIO_PATH:
        return sys.stdin.read()

    filepath = Path(source)
    stat_result = collect_file_stat(filepath)
    enforce_file_size(stat_result, max_file_size, filepath)

    try:
        with safe_read(filepath) as file:
            return file.read()
    except UnicodeDecodeError as error:
        error_message = f"Invalid UTF-8 sequence in {filepath}: {error}"
        raise IOError(error_message) from error


def _default_permissions() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_document(
    content: str,
    filepath: Path,
    expected_stat: os.stat_result | None = None,
    warn: Callable[[str], None] | None = None,
):
    """Write a document atomically, creating parent directories as needed.

    When `filepath` already exists its permissions (and, where possible, its
    ownership) carry over to the new file.

    Args:
        content: Text to write.
        filepath: Destination path.
        expected_stat: Stat captured when the document was read; when given,
            the write is refused if the file changed since.
        warn: Optional callback for non-fatal warnings.

    Raises:
        IOError: If the destination changed during processing, is a symlink or
            not a regular file, or cannot be written.

    Examples:
        write_document(text, Path("build/README.md"))
    """
    uid = gid = None
    if filepath.exists() or filepath.is_symlink():
        current_stat = collect_file_stat(filepath, follow_symlinks=False)
        if expected_stat is not None:
            ensure_file_unchanged(expected_stat, current_stat, filepath)
        permissions = stat.S_IMODE(current_stat.st_mode)
        uid = getattr(current_stat, "st_uid", None)
        gid = getattr(current_stat, "st_gid", None)
    else:
        permissions = _default_permissions()

    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        error_message = f"Error creating {filepath.parent}: {error}"
        raise IOError(error_message) from error

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", delete=False, dir=filepath.parent
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(content)

            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            os.chmod(tmp_file.name, permissions)

            # Ownership can only be preserved with sufficient privileges
            if uid is not None and gid is not None and hasattr(os, "chown"):
                try:
                    os.chown(tmp_file.name, uid, gid)
                except PermissionError:
                    if warn is not None:
                        warn(
                            f"Warning: Could not preserve file ownership for {filepath.name} "
                            "(requires elevated privileges)"
                        )

        os.replace(temp_path, filepath)
    finally:
        if temp_path is not None:
            try:
                Path(temp_path).unlink(missing_ok=True)
            except OSError:
                pass
