import heapq
from datetime import date
from itertools import islice
from typing import Iterable, Iterator, Sequence, Tuple

from subtracker.dates import DayLike
from subtracker.domain import ACTIVE, Category, Subscription
from subtracker.schedule import get_payment_dates_in_range


def _tagged(sub: Subscription, start: DayLike, end: DayLike) -> Iterator[Tuple[date, Subscription]]:
    for day in get_payment_dates_in_range(sub, start, end):
        yield day, sub


def iter_upcoming_payments(
    subs: Iterable[Subscription], start: DayLike, end: DayLike
) -> Iterator[Tuple[date, Subscription]]:
    """Occurrences of all active subscriptions in [start, end], merged in date order."""
    streams = [_tagged(s, start, end) for s in subs if s.status == ACTIVE]
    yield from heapq.merge(*streams, key=lambda item: item[0])


def lazy_top_categories(
    category_totals: Sequence[Tuple[Category, float]], k: int
) -> Iterator[Tuple[str, float]]:
    for category, total in islice(category_totals, max(0, k)):
        yield category.name, total
