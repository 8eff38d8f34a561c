"""Core constants used across Local History modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_REPOSITORY_DIR_NAME = ".localhistory"
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_LABEL_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_FSYNC = True
DEFAULT_WATCH_DEBOUNCE_SECONDS = 0.5
ENTRY_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S"
ENTRY_SEQUENCE_WIDTH = 3
ENTRY_SEQUENCE_LIMIT = 10**ENTRY_SEQUENCE_WIDTH
TEMP_ENTRY_PREFIX = "."
TEMP_ENTRY_SUFFIX = ".tmp"
REVISION_ID_SEPARATOR = "@"
CURRENT_ENTRY_ID = "current"
WINDOW_TITLE = "Local History"
