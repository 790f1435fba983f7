"""Configuration loading and management."""

from __future__ import annotations

import codecs
from dataclasses import dataclass, field, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_DELIMITER, DEFAULT_ENCODING, DEFAULT_MAX_FILE_SIZE
from .registry import DEFAULT_TRANSLATABLES, TranslatableRegistry


def _default_translatables() -> dict[str, list[str]]:
    return {table: list(columns) for table, columns in DEFAULT_TRANSLATABLES.items()}


@dataclass
class ExtractConfig:
    """Configuration for extracting translatable strings from SQL.

    Attributes:
        translatables: Table name mapped to the columns holding user-facing text.
        delimiter: Default field delimiter for COPY data blocks.
        encoding: Encoding used to read input files.
        max_file_size: Maximum input file size in bytes.

    Examples:
        ExtractConfig(translatables={"menu_node": ["label"]}, delimiter="|")
    """

    translatables: dict[str, list[str]] = field(default_factory=_default_translatables)
    delimiter: str = DEFAULT_DELIMITER
    encoding: str = DEFAULT_ENCODING
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`delimiter` must be a single character")
    """


def load_config(search_path: Path) -> ExtractConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.extract-sql]`` table from `pyproject.toml` and the
    ``[extract-sql]`` or ``[tool.extract-sql]`` table from `.extract-sql.toml`
    when present. Returns default values when no configuration is found. TOML
    files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        ExtractConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("sql"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "extract-sql")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".extract-sql.toml",
            table_paths=[("extract-sql",), ("tool", "extract-sql")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return ExtractConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> ExtractConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> ExtractConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return ExtractConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return ExtractConfig()

    try:
        return ExtractConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: ExtractConfig) -> None:
    """Validate an `ExtractConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If the registry is malformed, the delimiter is not a single
            character, the encoding is unknown, or the size limit is not a
            positive integer.

    Examples:
        validate_config(ExtractConfig(delimiter="|"))
    """
    if not isinstance(config.translatables, dict):
        raise ConfigError("`translatables` must be a table of table names to column lists")
    for table, columns in config.translatables.items():
        if not isinstance(table, str) or not table:
            raise ConfigError("`translatables` keys must be non-empty table names")
        if isinstance(columns, str) or not isinstance(columns, (list, tuple)):
            raise ConfigError(f"`translatables.{table}` must be a list of column names")
        if not all(isinstance(column, str) and column for column in columns):
            raise ConfigError(f"`translatables.{table}` must contain non-empty column names")

    if not isinstance(config.delimiter, str) or len(config.delimiter) != 1:
        raise ConfigError("`delimiter` must be a single character")
    if config.delimiter in ("\n", "\r", "\\"):
        raise ConfigError("`delimiter` cannot be a newline or a backslash")

    if not isinstance(config.encoding, str) or not config.encoding:
        raise ConfigError("`encoding` must not be empty")
    try:
        codecs.lookup(config.encoding)
    except LookupError as error:
        raise ConfigError(f"Unknown encoding: {config.encoding}") from error

    max_file_size = config.max_file_size
    if isinstance(max_file_size, bool) or not isinstance(max_file_size, int):
        raise ConfigError("`max_file_size` must be an integer")
    if max_file_size <= 0:
        raise ConfigError("`max_file_size` must be a positive integer")


def parse_translatable(value: str) -> tuple[str, str]:
    """Split a ``table.column`` override into its parts.

    The column is everything after the last dot, so schema-qualified tables
    (``public.menu_node.label``) are accepted.

    Raises:
        ConfigError: If the value has no dot or an empty part.
    """
    table, dot, column = value.strip().rpartition(".")
    if not dot or not table or not column:
        raise ConfigError(f"Invalid translatable column `{value}` (expected TABLE.COLUMN)")
    return table, column


def apply_overrides(
    config: ExtractConfig, translatables: tuple[str, ...] | list[str] = (), **overrides: object
) -> ExtractConfig:
    """Apply override values to an `ExtractConfig`.

    Args:
        config: Base configuration to update.
        translatables: Extra ``table.column`` entries merged into the registry.
        overrides: Override values keyed by configuration field name; values set
            to None are ignored.

    Returns:
        ExtractConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `ExtractConfig`.
        ConfigError: If a translatable override is malformed.

    Examples:
        updated = apply_overrides(config, ["menu_node.label"], delimiter="|")
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if translatables:
        merged = {table: list(columns) for table, columns in config.translatables.items()}
        for value in translatables:
            table, column = parse_translatable(value)
            columns = merged.setdefault(table, [])
            if column not in columns:
                columns.append(column)
        changes["translatables"] = merged
    if not changes:
        return config
    return replace(config, **changes)


def build_config(
    search_path: Path, translatables: tuple[str, ...] | list[str] = (), **overrides: object
) -> ExtractConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        translatables: Extra ``table.column`` registry entries.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        ExtractConfig: Validated configuration ready for scanning.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), ["menu_node.label"], delimiter="|")
    """
    config = load_config(search_path)
    validate_config(config)
    config = apply_overrides(config, translatables, **overrides)
    validate_config(config)
    return config


def build_registry(config: ExtractConfig) -> TranslatableRegistry:
    """Create the read-only registry described by `config`."""
    return TranslatableRegistry(config.translatables)
