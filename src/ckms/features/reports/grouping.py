"""Date bucketing and the generic group-and-reduce helper used by every report.

Bucket keys are plain strings whose lexicographic order matches chronological
order, so series can be sorted by key without parsing dates back.
"""
import datetime
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Literal, Optional, TypeVar, Union

Granularity = Literal["day", "week", "month"]
DateLike = Union[datetime.date, datetime.datetime, str, None]

T = TypeVar("T")
R = TypeVar("R")


def _to_utc_date(value: DateLike) -> Optional[datetime.date]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return None


def bucket_key(value: DateLike, granularity: Granularity = "day") -> str:
    """Maps a date-like value to its bucket key, or "" when it can't be read.

    day -> YYYY-MM-DD, week -> YYYY-MM-DD of the Sunday opening the week,
    month -> YYYY-MM. Naive datetimes are taken to be UTC.
    """
    day = _to_utc_date(value)
    if day is None:
        return ""
    if granularity == "month":
        return f"{day.year:04d}-{day.month:02d}"
    if granularity == "week":
        # date.weekday() is Monday=0; weeks here start on Sunday
        days_since_sunday = (day.weekday() + 1) % 7
        return (day - datetime.timedelta(days=days_since_sunday)).isoformat()
    return day.isoformat()


def group_by_date(
    rows: Iterable[T],
    granularity: Granularity,
    date_of: Callable[[T], DateLike],
    reduce: Callable[[str, List[T]], R],
) -> List[R]:
    """Groups rows into date buckets and reduces each bucket to one series point.

    Rows whose date can't be bucketed are dropped. Rows keep their encounter
    order inside a bucket, and the output is sorted ascending by bucket key.
    """
    buckets: Dict[str, List[T]] = defaultdict(list)
    for row in rows:
        key = bucket_key(date_of(row), granularity)
        if not key:
            continue
        buckets[key].append(row)
    return [reduce(key, buckets[key]) for key in sorted(buckets)]
