"""Filesystem helpers for extract-sql."""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from .constants import DEFAULT_ENCODING, DEFAULT_MAX_FILE_SIZE

MAX_FILE_SIZE_ENV_VAR = "EXTRACT_SQL_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed input file size.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["EXTRACT_SQL_MAX_FILE_SIZE"] = "204800"
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


def normalize_filepath(raw_path: str) -> Path:
    """Resolve and validate an input SQL filepath.

    Args:
        raw_path: User-supplied path (absolute, relative, or ``~``-prefixed).

    Returns:
        Path: Absolute path to the file.

    Raises:
        ValueError: If the path does not exist or is not a regular file.

    Examples:
        normalize_filepath("sql/seed.sql")
    """
    path = Path(raw_path).expanduser()

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        error_message = f"{path} does not exist."
        raise ValueError(error_message) from error
    except OSError as error:
        error_message = f"Error resolving {path}: {error}"
        raise ValueError(error_message) from error

    if not resolved.is_file():
        error_message = f"{resolved} is not a regular file."
        raise ValueError(error_message)

    return resolved


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Return stat information for a regular file.

    Raises:
        IOError: If the path is inaccessible or not a regular file.
    """
    try:
        stat_result = os.stat(filepath)
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

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


def safe_read(filepath: Path, encoding: str = DEFAULT_ENCODING) -> TextIO:
    """Open a file for reading with consistent error handling.

    Args:
        filepath: Path to the file.
        encoding: Text encoding of the file.

    Returns:
        TextIO: File handle opened for reading.

    Raises:
        IOError: If the path is missing, inaccessible, or not a file.

    Examples:
        with safe_read(Path("seed.sql")) as handle:
            first_line = handle.readline()
    """
    try:
        return open(filepath, "r", encoding=encoding)
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


def write_catalog(
    filepath: Path,
    lines: list[str],
    warn: Callable[[str], None] | None = None,
):
    """Atomically write catalog lines to `filepath`.

    The catalog is written to a temporary file in the target directory, synced,
    and moved into place. An existing file keeps its permissions and, where
    the platform allows, its ownership.

    Args:
        filepath: Destination path.
        lines: Rendered catalog lines.
        warn: Optional callback for non-fatal warnings (e.g., ownership preservation).

    Returns:
        None.

    Raises:
        IOError: If the destination cannot be written.

    Examples:
        write_catalog(Path("po/sql.pot"), catalog.render())
    """
    try:
        existing_stat: os.stat_result | None = os.stat(filepath)
    except FileNotFoundError:
        existing_stat = None
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

    if existing_stat is not None and not stat.S_ISREG(existing_stat.st_mode):
        error_message = f"{filepath} is not a regular file."
        raise IOError(error_message)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", delete=False, dir=filepath.parent
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.writelines(lines)

            # Ensure the temporary file is flushed and synced before it replaces the target
            tmp_file.flush()
            os.fsync(tmp_file.fileno())

            if existing_stat is not None:
                os.chmod(tmp_file.name, stat.S_IMODE(existing_stat.st_mode))
                uid = getattr(existing_stat, "st_uid", None)
                gid = getattr(existing_stat, "st_gid", None)
                if uid is not None and gid is not None and hasattr(os, "chown"):
                    try:
                        os.chown(tmp_file.name, uid, gid)
                    except PermissionError:
                        if warn is not None:
                            warn(
                                f"Warning: Could not preserve file ownership for {filepath.name} "
                                "(requires elevated privileges)"
                            )
            else:
                umask = os.umask(0)
                os.umask(umask)
                os.chmod(tmp_file.name, 0o666 & ~umask)

        os.replace(temp_path, filepath)
    except OSError as error:
        error_message = f"Error writing {filepath}: {error}"
        raise IOError(error_message) from error
    finally:
        if temp_path is not None:
            try:
                Path(temp_path).unlink(missing_ok=True)
            except OSError:
                pass
