"""Vietnamese display date/time codec.

Order and notification lists show timestamps as ``"HH:MM, D tháng M, YYYY"``.
Those strings are what list rows carry around, and they are also the sort key
for the lists. Lexical order of that format is not chronological
(``"10:00"`` < ``"9:00"``, ``"1 tháng 12"`` < ``"2 tháng 1"``), so sorting
always goes through :meth:`DateTimeCodec.parse`.

The round trip drops seconds. A string that cannot be parsed maps to
:data:`EPOCH` so that one bad row sorts last (descending) instead of
breaking the whole list.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone, tzinfo
from typing import Any, TypeVar

from shopsync._constants import DEFAULT_UTC_OFFSET_HOURS

T = TypeVar("T")

#: Sentinel instant returned for unparseable display strings.
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

MONTH_WORD = "tháng"

_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")
_DATE_RE = re.compile(rf"(\d{{1,2}})\s*{MONTH_WORD}\s*(\d{{1,2}}),\s*(\d{{4}})")

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000

DEFAULT_TIMEZONE = timezone(timedelta(hours=DEFAULT_UTC_OFFSET_HOURS))


def parse_server_timestamp(value: Any) -> datetime | None:
    """Convert a server timestamp to an aware datetime.

    Accepts ISO-8601 strings (a trailing ``Z`` included) and epoch numbers
    in seconds or milliseconds. Naive values are taken as UTC. Returns
    ``None`` when the value is missing or unreadable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True, slots=True)
class DisplayDateTime:
    """The two display parts of an instant."""

    time: str
    """Clock time, ``"HH:MM"`` (24h, zero padded)."""
    date: str
    """Long-form date, ``"D tháng M, YYYY"``."""

    def __str__(self) -> str:
        return f"{self.time}, {self.date}"


class DateTimeCodec:
    """Format instants for display and parse display strings back."""

    def __init__(self, tz: tzinfo = DEFAULT_TIMEZONE) -> None:
        self._tz = tz

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def format_parts(self, instant: datetime) -> DisplayDateTime:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        local = instant.astimezone(self._tz)
        return DisplayDateTime(
            time=f"{local.hour:02d}:{local.minute:02d}",
            date=f"{local.day} {MONTH_WORD} {local.month}, {local.year}",
        )

    def format(self, instant: datetime | None) -> str:
        """Render *instant* as ``"HH:MM, D tháng M, YYYY"`` (``""`` for None)."""
        if instant is None:
            return ""
        return str(self.format_parts(instant))

    def parse(self, text: str | None) -> datetime:
        """Parse a display string back into an instant in the codec's zone.

        Returns :data:`EPOCH` when the time or the date token is missing or
        out of range. Never raises.
        """
        if not text:
            return EPOCH
        time_match = _TIME_RE.search(text)
        date_match = _DATE_RE.search(text)
        if time_match is None or date_match is None:
            return EPOCH
        hour, minute = int(time_match.group(1)), int(time_match.group(2))
        day, month, year = (int(date_match.group(i)) for i in (1, 2, 3))
        try:
            return datetime(year, month, day, hour, minute, tzinfo=self._tz)
        except ValueError:
            return EPOCH

    def sort_by_display_time(
        self,
        items: Iterable[T],
        key: Callable[[T], str | None],
        *,
        descending: bool = True,
    ) -> list[T]:
        """Sort *items* chronologically by the display string *key* returns."""
        return sorted(items, key=lambda item: self.parse(key(item)), reverse=descending)
