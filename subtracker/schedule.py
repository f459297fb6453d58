"""
Recurring billing schedule.

Every occurrence of a subscription is derived from its billing anchor by
repeated interval addition, so the same anchor always yields the same
sequence no matter when it is queried.
"""

import logging
from datetime import date
from typing import Callable, Iterator, Optional

from dateutil.relativedelta import relativedelta

from subtracker.config import MAX_ADVANCE_STEPS
from subtracker.dates import DayLike, end_of_month, parse_day, start_of_month
from subtracker.domain import (
    ACTIVE, CANCELED, CUSTOM, PAUSED, WEEK, WEEKLY, YEARLY, Subscription,
)

logger = logging.getLogger(__name__)


def interval_of(subscription: Subscription) -> int:
    """Repeat multiplier, with zero, missing or negative counts read as 1."""
    count = subscription.interval_count
    return count if count and count > 0 else 1


def add_interval(day: date, subscription: Subscription) -> date:
    """Advance `day` by exactly one occurrence of `subscription`.

    Month and year steps clamp to the last valid day of the target month
    (Jan 31 + 1 month -> Feb 28/29).
    """
    interval = interval_of(subscription)
    schedule_type = subscription.schedule_type

    if schedule_type == WEEKLY:
        return day + relativedelta(weeks=interval)
    if schedule_type == YEARLY:
        return day + relativedelta(years=interval)
    if schedule_type == CUSTOM and subscription.interval_unit == WEEK:
        return day + relativedelta(weeks=interval)
    # monthly, custom by month and unknown types
    return day + relativedelta(months=interval)


class PaymentDates:
    """Lazy, finite, restartable walk over occurrence dates.

    Each iteration starts again from `first()` and applies `step` until the
    candidate passes `end`, stopping early after `max_steps` advances.
    Candidates before `start` are stepped over, never yielded.
    """

    def __init__(self, first: Callable[[], date], step: Callable[[date], date], start: date, end: date,
                 max_steps: int = MAX_ADVANCE_STEPS):
        self._first = first
        self._step = step
        self._start = start
        self._end = end
        self._max_steps = max_steps

    def __iter__(self) -> Iterator[date]:
        current = self._first()
        steps = 0
        # a capped first candidate can still lie before start
        while current < self._start:
            current = self._step(current)
            steps += 1
            if steps > self._max_steps:
                logger.warning("Payment date walk never reached %s, stopped at %s", self._start, current)
                return
        while current <= self._end:
            yield current
            current = self._step(current)
            steps += 1
            if steps > self._max_steps:
                logger.warning("Payment date walk stopped after %d steps at %s", steps, current)
                return

    def __repr__(self) -> str:
        return f"PaymentDates(start={self._start.isoformat()}, end={self._end.isoformat()})"


def compute_next_payment_date(subscription: Subscription, from_date: Optional[DayLike] = None) -> date:
    """
    Return the first occurrence on or after `from_date` (today by default).

    Args:
        subscription: Subscription whose billing anchor seeds the walk
        from_date: Reference day; any time of day is ignored

    Returns:
        The occurrence date. When the advance cap trips, the last candidate
        computed is returned instead.
    """
    start = parse_day(from_date if from_date is not None else date.today())
    candidate = parse_day(subscription.billing_anchor)

    steps = 0
    while candidate < start:
        candidate = add_interval(candidate, subscription)
        steps += 1
        if steps > MAX_ADVANCE_STEPS:
            logger.warning(
                "Next payment for %s capped after %d steps at %s",
                subscription.id, steps, candidate,
            )
            break

    return candidate


def get_payment_dates_in_range(subscription: Subscription, start: DayLike, end: DayLike) -> PaymentDates:
    """Every occurrence d with start <= d <= end, both bounds inclusive."""
    start_day = parse_day(start)
    end_day = parse_day(end)
    return PaymentDates(
        first=lambda: compute_next_payment_date(subscription, start_day),
        step=lambda day: add_interval(day, subscription),
        start=start_day,
        end=end_day,
    )


def get_payment_dates_for_month(subscription: Subscription, month_date: DayLike) -> PaymentDates:
    return get_payment_dates_in_range(subscription, start_of_month(month_date), end_of_month(month_date))


def is_payment_due_on_date(subscription: Subscription, day: DayLike) -> bool:
    target = parse_day(day)
    return compute_next_payment_date(subscription, target) == target


def is_subscription_active(subscription: Subscription, day: Optional[DayLike] = None) -> bool:
    status = subscription.status
    if status == ACTIVE:
        return True
    if status in (PAUSED, CANCELED):
        return False
    # Unknown status: only a subscription that has not started yet counts
    reference = parse_day(day if day is not None else date.today())
    return parse_day(subscription.start_date) > reference
