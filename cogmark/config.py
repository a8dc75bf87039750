"""Configuration loading and management."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

from .markers import (
    DEFAULT_END_BLOCK_MARKER,
    DEFAULT_END_OUTPUT_MARKER,
    DEFAULT_START_BLOCK_MARKER,
    MarkerSet,
)


@dataclass
class CogConfig:
    """Configuration for processing documents with embedded blocks.

    Attributes:
        start_block_marker: Marker opening a block; the rest of its line is the
            command to run.
        end_block_marker: Marker closing the block source.
        end_output_marker: Marker closing the generated output region.
        delete_blocks: Drop every marker line and block body from the output.
        warn_if_no_blocks: Treat a document without blocks as an error.
        omit_output: Discard generated output without running any command.
        check_only: Fail when processing would change the document.
        checksum: Stamp and verify a digest of each block's output.
        max_file_size: Maximum input file size in bytes.

    Examples:
        CogConfig(delete_blocks=True, checksum=True)
    """

    # Markers
    start_block_marker: str = DEFAULT_START_BLOCK_MARKER
    end_block_marker: str = DEFAULT_END_BLOCK_MARKER
    end_output_marker: str = DEFAULT_END_OUTPUT_MARKER

    # Behavior
    delete_blocks: bool = False
    warn_if_no_blocks: bool = False
    omit_output: bool = False
    check_only: bool = False
    checksum: bool = False

    # Limits
    max_file_size: int = 10 * 1024 * 1024

    @property
    def markers(self) -> MarkerSet:
        return MarkerSet(self.start_block_marker, self.end_block_marker, self.end_output_marker)


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`start_block_marker` must not be empty")
    """


_BOOLEAN_FIELDS = ("delete_blocks", "warn_if_no_blocks", "omit_output", "check_only", "checksum")
_MARKER_FIELDS = ("start_block_marker", "end_block_marker", "end_output_marker")


def load_config(search_path: Path) -> CogConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.cogmark]`` table from `pyproject.toml` and the ``[cogmark]`` or
    ``[tool.cogmark]`` table from `.cogmark.toml` when present. Returns default
    values when no configuration is found. TOML files that cannot be read or
    decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        CogConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If a table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "cogmark")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".cogmark.toml",
            table_paths=[("cogmark",), ("tool", "cogmark")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return CogConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> CogConfig | None:
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
) -> CogConfig:
    table_display = ".".join(table_path)

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    known = {field.name for field in fields(CogConfig)}
    unknown = sorted(set(raw_config) - known)
    if unknown:
        raise ConfigError(
            f"Unsupported `[{table_display}]` keys in {config_file}: {', '.join(unknown)}"
        )

    return CogConfig(**raw_config)


def validate_config(config: CogConfig) -> None:
    """Validate a `CogConfig` instance.

    Raises:
        ConfigError: If a marker is empty or not a string, two markers are
            identical, a switch is not a boolean, or the size limit is not a
            positive integer.
    """
    for name in _MARKER_FIELDS:
        value = getattr(config, name)
        if not isinstance(value, str):
            raise ConfigError(f"`{name}` must be a string")

    validate_markers(config.markers)

    for name in _BOOLEAN_FIELDS:
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"`{name}` must be a boolean")

    max_file_size = config.max_file_size
    if isinstance(max_file_size, bool) or not isinstance(max_file_size, int):
        raise ConfigError("`max_file_size` must be an integer")
    if max_file_size <= 0:
        raise ConfigError("`max_file_size` must be a positive integer")


def validate_markers(markers: MarkerSet) -> None:
    """Reject empty or identical markers.

    Examples:
        validate_markers(MarkerSet("<<", ">>", "<<end>>"))
    """
    for name, value in zip(_MARKER_FIELDS, markers):
        if not value:
            raise ConfigError(f"`{name}` must not be empty")

    if len(set(markers)) != len(markers):
        raise ConfigError("Markers must be distinct from each other")


def parse_markers(text: str) -> MarkerSet:
    """Split a space-separated marker triple.

    The third marker keeps any spaces that follow the second separator.

    Examples:
        parse_markers("<!--[[[ ]]]--> <!--[[[end]]]-->")
    """
    parts = text.split(" ", 2)
    if len(parts) != 3 or not all(parts):
        raise ConfigError(
            f"Invalid markers: {text!r} (expected three space-separated values)"
        )
    return MarkerSet(*parts)


def apply_overrides(config: CogConfig, **overrides: object) -> CogConfig:
    """Apply override values to a `CogConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set
            to None are ignored. A ``markers`` override may be a `MarkerSet` or
            a space-separated string and replaces all three markers.

    Returns:
        CogConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `CogConfig`.
        ConfigError: If a ``markers`` string is malformed.
    """
    changes = {key: value for key, value in overrides.items() if value is not None}

    markers = changes.pop("markers", None)
    if markers is not None:
        if isinstance(markers, str):
            markers = parse_markers(markers)
        changes.update(zip(_MARKER_FIELDS, markers))

    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> CogConfig:
    """Load, override, and validate configuration.

    Examples:
        config = build_config(Path.cwd(), delete_blocks=True)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config
