"""
Calendar buckets for retention intervals.

Every timestamp falls into exactly one bucket per interval kind. A bucket is
identified by its start instant in UTC, which keeps ordering chronological
across boundaries where raw calendar fields are not (ISO week 52 of one year
versus week 1 of the next, for example).

Conventions:
  - naive datetimes are taken to be UTC; aware ones are converted to UTC
  - weeks are ISO weeks starting on Monday, so the ISO year decides which
    year a boundary week belongs to
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum


class IntervalKind(str, Enum):
    """Calendar granularity of a generation; the value is its argument letter."""

    HOURLY = "H"
    DAILY = "D"
    WEEKLY = "W"
    MONTHLY = "M"
    YEARLY = "Y"

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class BucketKey:
    """Calendar bucket of one interval kind, ordered by its start instant."""

    start: datetime
    interval: IntervalKind

    def __str__(self) -> str:
        return bucket_label(self)

    def __lt__(self, other: BucketKey) -> bool:
        return compare(self, other) < 0

    def __le__(self, other: BucketKey) -> bool:
        return compare(self, other) <= 0

    def __gt__(self, other: BucketKey) -> bool:
        return compare(self, other) > 0

    def __ge__(self, other: BucketKey) -> bool:
        return compare(self, other) >= 0


def to_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def bucket_start(ts: datetime, interval: IntervalKind) -> datetime:
    dt = to_utc(ts)
    if interval is IntervalKind.HOURLY:
        return dt.replace(minute=0, second=0, microsecond=0)
    if interval is IntervalKind.DAILY:
        return dt.replace(hour=0, minute=0, second=0, microsecond=0)
    if interval is IntervalKind.WEEKLY:
        day = dt.replace(hour=0, minute=0, second=0, microsecond=0)
        return day - timedelta(days=day.isoweekday() - 1)
    if interval is IntervalKind.MONTHLY:
        return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if interval is IntervalKind.YEARLY:
        return dt.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    raise ValueError(f"unknown interval kind: {interval!r}")


def bucket_key(ts: datetime, interval: IntervalKind) -> BucketKey:
    """Return the bucket of ``interval`` that ``ts`` falls into."""
    return BucketKey(start=bucket_start(ts, interval), interval=interval)


def compare(a: BucketKey, b: BucketKey) -> int:
    """Three-way comparison: -1 if ``a`` is older than ``b``, 1 if newer, 0 if equal."""
    if a.interval is not b.interval:
        raise ValueError(f"cannot compare {a.interval.label} bucket with {b.interval.label} bucket")
    if a.start < b.start:
        return -1
    if a.start > b.start:
        return 1
    return 0


def bucket_label(key: BucketKey) -> str:
    start = key.start
    if key.interval is IntervalKind.HOURLY:
        return start.strftime("%Y-%m-%d %H:00")
    if key.interval is IntervalKind.DAILY:
        return start.strftime("%Y-%m-%d")
    if key.interval is IntervalKind.WEEKLY:
        iso_year, iso_week, _ = start.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if key.interval is IntervalKind.MONTHLY:
        return start.strftime("%Y-%m")
    return start.strftime("%Y")
