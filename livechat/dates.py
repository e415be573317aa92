"""Day buckets for message timestamps.

Classifies a timestamp relative to "now" as Today, Yesterday or an absolute
date, and folds a sequence of entries into the headers a renderer shows.
All comparisons use local calendar components, never timestamp arithmetic.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from livechat.models import Entry


@dataclass(frozen=True)
class Today:
    def __str__(self) -> str:
        return "Today"


@dataclass(frozen=True)
class Yesterday:
    def __str__(self) -> str:
        return "Yesterday"


@dataclass(frozen=True)
class AbsoluteDate:
    day: int
    month_name: str
    year: int

    def __str__(self) -> str:
        return f"{self.day:02d} {self.month_name} {self.year:04d}"


BucketLabel = Today | Yesterday | AbsoluteDate


def _local(moment: datetime) -> datetime:
    """Convert aware datetimes to local time; naive ones are already local."""
    if moment.tzinfo is not None:
        return moment.astimezone()
    return moment


def _calendar_day(moment: datetime) -> date:
    return _local(moment).date()


def classify(timestamp: datetime, now: datetime) -> BucketLabel:
    """Classify `timestamp` as Today, Yesterday or an absolute date."""
    day = _calendar_day(timestamp)
    today = _calendar_day(now)
    if day == today:
        return Today()
    # date arithmetic steps one calendar day, rolling months and years
    if day == today - timedelta(days=1):
        return Yesterday()
    return AbsoluteDate(day.day, calendar.month_name[day.month], day.year)


def format_label(label: BucketLabel) -> str:
    return str(label)


def format_message_time(timestamp: datetime, now: datetime) -> str:
    """Short time for a message line: HH:MM today, with the date otherwise."""
    local = _local(timestamp)
    if _calendar_day(timestamp) == _calendar_day(now):
        return local.strftime("%H:%M")
    return local.strftime("%d.%m.%Y, %H:%M")


@dataclass(frozen=True)
class HeaderFold:
    """Accumulator threaded through a render pass.

    Holds the label of the last entry that had a timestamp. Untimed entries
    neither get a header nor reset the state.
    """

    last: BucketLabel | None = None

    def step(
        self, timestamp: datetime | None, now: datetime
    ) -> tuple[BucketLabel | None, HeaderFold]:
        """Return (header to show or None, next fold state)."""
        if timestamp is None:
            return None, self
        label = classify(timestamp, now)
        if label == self.last:
            return None, self
        return label, HeaderFold(label)


def group_by_day(
    entries: Iterable[Entry], now: datetime, fold: HeaderFold | None = None
) -> Iterator[tuple[Entry, BucketLabel | None]]:
    """Pair each entry with the header to render above it, if any.

    Args:
        entries: Chronologically ascending entries
        now: Single snapshot of the current time for the whole pass
        fold: Starting state, e.g. to continue a previous page
    """
    state = fold or HeaderFold()
    for entry in entries:
        header, state = state.step(entry.created_at, now)
        yield entry, header
