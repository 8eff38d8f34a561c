"""Runtime configuration model for Local History.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_FSYNC,
    DEFAULT_LABEL_FORMAT,
    DEFAULT_REPOSITORY_DIR_NAME,
    DEFAULT_WATCH_DEBOUNCE_SECONDS,
)
from core.errors import LocalHistoryConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class LocalHistoryConfig:
    """Validated runtime configuration.

    Attributes:
        repository_dir_name: Directory under the workspace root holding revisions.
        chunk_size: Byte count per read when streaming saved files.
        label_format: strftime pattern for human revision labels.
        fsync: Whether temp entries are fsynced before being finalized.
        watch_debounce_seconds: Quiet period before a watched save is captured.
    """

    repository_dir_name: str = DEFAULT_REPOSITORY_DIR_NAME
    chunk_size: int = DEFAULT_CHUNK_SIZE
    label_format: str = DEFAULT_LABEL_FORMAT
    fsync: bool = DEFAULT_FSYNC
    watch_debounce_seconds: float = DEFAULT_WATCH_DEBOUNCE_SECONDS

    @classmethod
    def from_env(cls) -> "LocalHistoryConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            LocalHistoryConfigError: If environment values are invalid.
        """
        repository_dir_name = _parse_repository_dir(
            os.getenv("LOCALHISTORY_REPOSITORY_DIR", DEFAULT_REPOSITORY_DIR_NAME)
        )
        chunk_size = _parse_chunk_size(
            os.getenv("LOCALHISTORY_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))
        )
        label_format = os.getenv("LOCALHISTORY_LABEL_FORMAT", DEFAULT_LABEL_FORMAT)
        fsync = _parse_bool("LOCALHISTORY_FSYNC", os.getenv("LOCALHISTORY_FSYNC"), DEFAULT_FSYNC)
        debounce = _parse_debounce(
            os.getenv("LOCALHISTORY_WATCH_DEBOUNCE", str(DEFAULT_WATCH_DEBOUNCE_SECONDS))
        )
        return cls(
            repository_dir_name=repository_dir_name,
            chunk_size=chunk_size,
            label_format=label_format,
            fsync=fsync,
            watch_debounce_seconds=debounce,
        )


def _parse_repository_dir(raw_value: str) -> str:
    """Validate the repository directory name.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Directory name as a single path component.

    Raises:
        LocalHistoryConfigError: If value is empty or contains separators.
    """
    value = raw_value.strip()
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise LocalHistoryConfigError(
            "Invalid LOCALHISTORY_REPOSITORY_DIR value: "
            f"expected a single directory name, got '{raw_value}'. "
            "Use a plain name such as '.localhistory'."
        )
    return value


def _parse_chunk_size(raw_value: str) -> int:
    """Parse the streaming chunk size environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive chunk size in bytes.

    Raises:
        LocalHistoryConfigError: If value is not a positive integer.
    """
    try:
        chunk_size = int(raw_value)
    except ValueError as error:
        raise LocalHistoryConfigError(
            "Invalid LOCALHISTORY_CHUNK_SIZE value: "
            f"expected integer, got '{raw_value}'. "
            "Set LOCALHISTORY_CHUNK_SIZE to a positive byte count."
        ) from error
    if chunk_size <= 0:
        raise LocalHistoryConfigError(
            f"Invalid LOCALHISTORY_CHUNK_SIZE value: expected positive integer, got {chunk_size}."
        )
    return chunk_size


def _parse_bool(name: str, raw_value: str | None, default: bool) -> bool:
    """Parse a boolean flag environment value."""
    if raw_value is None:
        return default
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise LocalHistoryConfigError(
        f"Invalid {name} value: expected one of "
        f"{', '.join(_TRUE_VALUES + _FALSE_VALUES)}, got '{raw_value}'."
    )


def _parse_debounce(raw_value: str) -> float:
    """Parse the watcher debounce interval in seconds."""
    try:
        seconds = float(raw_value)
    except ValueError as error:
        raise LocalHistoryConfigError(
            "Invalid LOCALHISTORY_WATCH_DEBOUNCE value: "
            f"expected number of seconds, got '{raw_value}'."
        ) from error
    if seconds < 0:
        raise LocalHistoryConfigError(
            f"Invalid LOCALHISTORY_WATCH_DEBOUNCE value: expected non-negative, got {seconds}."
        )
    return seconds
