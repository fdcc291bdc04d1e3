"""
Calendar bucketing for dashboard trends.

Splits a query range into contiguous day, week or month buckets.
All boundaries are computed in UTC; weeks start on Monday. A bucket's end is
the last microsecond before the next bucket starts, and both ends are
inclusive.
"""

from datetime import date, datetime, timedelta, timezone
from typing import List, Tuple, Union

import structlog

from exceptions import InvalidRangeError
from models.trends import Bucket, Granularity

logger = structlog.get_logger(__name__)

# datetime.weekday() value buckets start on (0 = Monday)
WEEK_START = 0

_TICK = timedelta(microseconds=1)


def ensure_utc(instant: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def start_of_day(instant: datetime) -> datetime:
    return ensure_utc(instant).replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(instant: datetime) -> datetime:
    return start_of_day(instant) + timedelta(days=1) - _TICK


def _first_of_next_month(first: datetime) -> datetime:
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1, day=1)
    return first.replace(month=first.month + 1, day=1)


def bucket_containing(
    instant: datetime,
    granularity: Union[Granularity, str, None] = Granularity.DAY,
) -> Bucket:
    """
    Get the bucket an instant falls in.

    Args:
        instant: Any datetime (naive values are treated as UTC)
        granularity: day, week or month; unknown values mean day

    Returns:
        Bucket spanning the whole calendar unit around the instant
    """
    granularity = Granularity.parse(granularity)
    day_start = start_of_day(instant)

    if granularity == Granularity.WEEK:
        start = day_start - timedelta(days=(day_start.weekday() - WEEK_START) % 7)
        next_start = start + timedelta(days=7)
    elif granularity == Granularity.MONTH:
        start = day_start.replace(day=1)
        next_start = _first_of_next_month(start)
    else:
        start = day_start
        next_start = start + timedelta(days=1)

    return Bucket(start=start, end=next_start - _TICK)


def generate_buckets(
    range_start: datetime,
    range_end: datetime,
    granularity: Union[Granularity, str, None] = Granularity.DAY,
) -> List[Bucket]:
    """
    Build the ordered, gap-free bucket sequence covering a range.

    Starts from the bucket containing range_start and keeps appending the
    following bucket until the cursor passes range_end. Month buckets advance
    to the 1st of the next calendar month rather than by a fixed duration.

    Args:
        range_start: First instant of the range
        range_end: Last instant of the range (inclusive)
        granularity: day, week or month; unknown values mean day

    Returns:
        Non-empty list of buckets in chronological order

    Raises:
        InvalidRangeError: If range_start is after range_end
    """
    range_start = ensure_utc(range_start)
    range_end = ensure_utc(range_end)
    if range_start > range_end:
        raise InvalidRangeError(range_start, range_end)

    granularity = Granularity.parse(granularity)

    buckets: List[Bucket] = []
    cursor = range_start
    while cursor <= range_end:
        bucket = bucket_containing(cursor, granularity)
        buckets.append(bucket)
        if granularity == Granularity.MONTH:
            cursor = _first_of_next_month(bucket.start)
        else:
            cursor = bucket.end + _TICK

    logger.debug(
        "buckets_generated",
        granularity=granularity.value,
        count=len(buckets),
    )
    return buckets


def bucket_dates(bucket: Bucket) -> Tuple[date, date]:
    """Calendar dates (start, end) used when a bucket is rendered."""
    return bucket.start.date(), bucket.end.date()
