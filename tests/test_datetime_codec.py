from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone

from shopsync.datetime_codec import EPOCH, DateTimeCodec, parse_server_timestamp

ICT = timezone(timedelta(hours=7))


def test_parse_matches_direct_construction() -> None:
    codec = DateTimeCodec(ICT)
    assert codec.parse("09:15, 3 tháng 11, 2024") == datetime(2024, 11, 3, 9, 15, tzinfo=ICT)


def test_parse_malformed_returns_epoch() -> None:
    codec = DateTimeCodec(ICT)
    assert codec.parse("3 tháng 11, 2024") == EPOCH
    assert codec.parse("09:15") == EPOCH
    assert codec.parse("") == EPOCH
    assert codec.parse(None) == EPOCH
    assert codec.parse("25:99, 31 tháng 2, 2024") == EPOCH


def test_format_drops_seconds_and_uses_local_zone() -> None:
    codec = DateTimeCodec(ICT)
    instant = datetime(2024, 11, 3, 2, 15, 42, tzinfo=UTC)

    parts = codec.format_parts(instant)
    assert parts.time == "09:15"
    assert parts.date == "3 tháng 11, 2024"
    assert codec.format(instant) == "09:15, 3 tháng 11, 2024"
    assert codec.parse(codec.format(instant)) == instant.replace(second=0)


def test_format_none_is_empty() -> None:
    assert DateTimeCodec(ICT).format(None) == ""


@dataclass
class _Row:
    code: str
    time: str


def test_sort_descending_is_chronological_not_lexical() -> None:
    codec = DateTimeCodec(ICT)
    rows = [
        _Row("a", "08:00, 1 tháng 1, 2025"),
        _Row("b", "10:00, 1 tháng 1, 2025"),
        _Row("c", "09:00, 1 tháng 1, 2025"),
    ]

    ordered = codec.sort_by_display_time(rows, lambda row: row.time)
    assert [row.time[:5] for row in ordered] == ["10:00", "09:00", "08:00"]


def test_sort_handles_cross_month_and_single_digit_hours() -> None:
    codec = DateTimeCodec(ICT)
    times = ["9:05, 2 tháng 1, 2025", "23:59, 31 tháng 12, 2024", "10:00, 2 tháng 1, 2025", "garbage"]

    ordered = codec.sort_by_display_time(times, lambda value: value, descending=False)
    assert ordered == ["garbage", "23:59, 31 tháng 12, 2024", "9:05, 2 tháng 1, 2025", "10:00, 2 tháng 1, 2025"]


def test_parse_server_timestamp_variants() -> None:
    assert parse_server_timestamp("2025-01-01T01:00:00Z") == datetime(2025, 1, 1, 1, tzinfo=UTC)
    assert parse_server_timestamp("2025-01-01T01:00:00") == datetime(2025, 1, 1, 1, tzinfo=UTC)
    assert parse_server_timestamp(1_735_693_200_000) == datetime(2025, 1, 1, 1, tzinfo=UTC)
    assert parse_server_timestamp(1_735_693_200) == datetime(2025, 1, 1, 1, tzinfo=UTC)
    assert parse_server_timestamp("yesterday") is None
    assert parse_server_timestamp(None) is None
