"""Revision entry naming.

Entry names encode a fixed-width UTC timestamp plus a sequence suffix,
so lexical order of a history directory equals chronological order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import re

from core.constants import ENTRY_SEQUENCE_LIMIT, ENTRY_SEQUENCE_WIDTH, ENTRY_TIMESTAMP_FORMAT

_ENTRY_PATTERN = re.compile(
    r"(?P<stamp>\d{8}T\d{6})\.(?P<millis>\d{3})-(?P<sequence>\d{%d})" % ENTRY_SEQUENCE_WIDTH
)


@dataclass(frozen=True)
class ParsedEntry:
    """Decoded fields of a revision entry name."""

    stamp: str
    created_at: datetime
    sequence: int


def normalize_timestamp(timestamp: datetime | None) -> datetime:
    """Return an aware UTC timestamp, treating naive values as UTC."""
    if timestamp is None:
        return datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def encode_stamp(timestamp: datetime) -> str:
    """Encode a timestamp as the sortable prefix shared by same-moment entries.

    Args:
        timestamp: Capture time; converted to UTC.

    Returns:
        Stamp like ``20240101T153045.001``.
    """
    moment = normalize_timestamp(timestamp)
    return (
        f"{moment.year:04d}{moment.month:02d}{moment.day:02d}"
        f"T{moment.hour:02d}{moment.minute:02d}{moment.second:02d}"
        f".{moment.microsecond // 1000:03d}"
    )


def build_entry_name(stamp: str, sequence: int) -> str:
    """Join a stamp and sequence into a finalized entry name."""
    if not 0 <= sequence < ENTRY_SEQUENCE_LIMIT:
        raise ValueError(f"Entry sequence {sequence} outside [0, {ENTRY_SEQUENCE_LIMIT}).")
    return f"{stamp}-{sequence:0{ENTRY_SEQUENCE_WIDTH}d}"


def parse_entry_name(name: str) -> ParsedEntry | None:
    """Decode an entry name, returning None for foreign or temporary names.

    Args:
        name: Directory entry name.

    Returns:
        Parsed entry fields, or None when the name is not a revision.
    """
    match = _ENTRY_PATTERN.fullmatch(name)
    if match is None:
        return None
    try:
        moment = datetime.strptime(match.group("stamp"), ENTRY_TIMESTAMP_FORMAT)
    except ValueError:
        return None
    created_at = moment.replace(
        microsecond=int(match.group("millis")) * 1000,
        tzinfo=timezone.utc,
    )
    return ParsedEntry(
        stamp=f"{match.group('stamp')}.{match.group('millis')}",
        created_at=created_at,
        sequence=int(match.group("sequence")),
    )


def next_sequence(stamp: str, existing_names: list[str]) -> int:
    """Return the next free sequence number for a stamp.

    Args:
        stamp: Encoded timestamp prefix.
        existing_names: Names currently present in the history directory.

    Returns:
        One past the highest sequence already used with this stamp.
    """
    highest = -1
    for name in existing_names:
        parsed = parse_entry_name(name)
        if parsed is not None and parsed.stamp == stamp:
            highest = max(highest, parsed.sequence)
    return highest + 1
