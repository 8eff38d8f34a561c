"""Unit tests for revision entry naming."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from store.revision_entry import (
    build_entry_name,
    encode_stamp,
    next_sequence,
    parse_entry_name,
)


def test_encode_stamp_is_fixed_width_utc() -> None:
    """Stamps should be zero-padded UTC with millisecond precision."""
    moment = datetime(2024, 1, 1, 16, 30, 45, 1500, tzinfo=timezone(timedelta(hours=1)))

    stamp = encode_stamp(moment)

    assert stamp == "20240101T153045.001"


def test_entry_names_sort_chronologically() -> None:
    """Lexical order of entry names should equal time order."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    moments = [start + timedelta(milliseconds=offset) for offset in (5, 999, 1000, 60000)]
    names = [build_entry_name(encode_stamp(moment), 0) for moment in moments]

    assert sorted(names) == names


def test_parse_entry_name_roundtrips_fields() -> None:
    """Parsed entries should expose time and sequence."""
    parsed = parse_entry_name("20240101T153045.001-007")

    assert parsed is not None and (parsed.created_at, parsed.sequence) == (
        datetime(2024, 1, 1, 15, 30, 45, 1000, tzinfo=timezone.utc),
        7,
    )


def test_parse_entry_name_skips_foreign_names() -> None:
    """Temp files and unrelated names are not revisions."""
    names = [".20240101T153045.001-000.abc.tmp", "notes.txt", "20241399T000000.000-000"]

    assert [parse_entry_name(name) for name in names] == [None, None, None]


def test_next_sequence_counts_only_matching_stamp() -> None:
    """Sequence should continue after the highest entry sharing the stamp."""
    existing = [
        "20240101T153045.001-000",
        "20240101T153045.001-001",
        "20240101T153045.002-000",
        ".20240101T153045.001-009.abc.tmp",
    ]

    assert next_sequence("20240101T153045.001", existing) == 2


def test_parse_entry_name_rejects_trailing_newline() -> None:
    """Entry names must match in full, without trailing characters."""
    assert parse_entry_name("20240101T153045.001-000\n") is None


def test_encode_stamp_pads_years_before_1000() -> None:
    """Stamps stay fixed-width for any four-digit-or-less year."""
    stamp = encode_stamp(datetime(999, 1, 1, tzinfo=timezone.utc))

    assert stamp == "09990101T000000.000"
