"""
Totals & Forecasts

Aggregates subscription costs into figures expressed in the main currency
of the settings. Monthly and year-to-date totals count real occurrences on
the calendar; the yearly forecast and its monthly average use a
schedule-normalized run rate instead. The two are separate on purpose and
can disagree for a given month (a weekly plan bills 4 or 5 times a month).
"""

from datetime import date
from typing import Iterable, List, Optional, Tuple

from subtracker.currency import convert_currency, round_currency
from subtracker.dates import DayLike, end_of_month, end_of_year, parse_day, start_of_month, start_of_year
from subtracker.domain import ACTIVE, CUSTOM, WEEK, WEEKLY, YEARLY, Category, CurrencyRates, Settings, Subscription
from subtracker.schedule import get_payment_dates_in_range, interval_of

WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12


def _active(subscriptions: Iterable[Subscription]) -> List[Subscription]:
    return [s for s in subscriptions if s.status == ACTIVE]


def _occurrences(subscription: Subscription, start: DayLike, end: DayLike) -> int:
    return sum(1 for _ in get_payment_dates_in_range(subscription, start, end))


def _to_main(amount: float, subscription: Subscription, settings: Settings, rates: CurrencyRates) -> float:
    return convert_currency(amount, subscription.currency, settings.main_currency, rates)


def get_monthly_equivalent(subscription: Subscription) -> float:
    """Cost per calendar month in the subscription's own currency, unrounded."""
    interval = interval_of(subscription)
    amount = subscription.amount
    schedule_type = subscription.schedule_type

    if schedule_type == WEEKLY or (schedule_type == CUSTOM and subscription.interval_unit == WEEK):
        return amount * WEEKS_PER_YEAR / MONTHS_PER_YEAR / interval
    if schedule_type == YEARLY:
        return amount / MONTHS_PER_YEAR / interval
    return amount / interval


def calculate_monthly_total(subscriptions: Iterable[Subscription], month_date: DayLike,
                            settings: Settings, rates: CurrencyRates) -> float:
    """Sum of every charge that actually falls inside the month of `month_date`."""
    start = start_of_month(month_date)
    end = end_of_month(month_date)

    total = 0.0
    for sub in _active(subscriptions):
        count = _occurrences(sub, start, end)
        total += count * _to_main(sub.amount, sub, settings, rates)

    return round_currency(total, settings.round_whole_numbers)


def _yearly_run_rate(subscriptions: Iterable[Subscription], settings: Settings, rates: CurrencyRates) -> float:
    return sum(
        _to_main(get_monthly_equivalent(sub) * MONTHS_PER_YEAR, sub, settings, rates)
        for sub in _active(subscriptions)
    )


def calculate_yearly_forecast(subscriptions: Iterable[Subscription], settings: Settings,
                              rates: CurrencyRates) -> float:
    return round_currency(_yearly_run_rate(subscriptions, settings, rates), settings.round_whole_numbers)


def calculate_average_monthly(subscriptions: Iterable[Subscription], settings: Settings,
                              rates: CurrencyRates) -> float:
    """Yearly run rate divided by 12, rounded once after the division."""
    yearly = _yearly_run_rate(subscriptions, settings, rates)
    return round_currency(yearly / MONTHS_PER_YEAR, settings.round_whole_numbers)


def calculate_total_spent(subscription: Subscription, settings: Settings, rates: CurrencyRates,
                          now: Optional[DayLike] = None) -> float:
    """Lifetime spend from the start date up to today, or up to the pause/cancel date."""
    end = now if now is not None else date.today()
    if subscription.status != ACTIVE and subscription.status_changed_at:
        end = subscription.status_changed_at

    payments = _occurrences(subscription, subscription.start_date, end)
    total = _to_main(payments * subscription.amount, subscription, settings, rates)
    return round_currency(total, settings.round_whole_numbers)


def calculate_year_to_date_total(subscriptions: Iterable[Subscription], settings: Settings,
                                 rates: CurrencyRates, day: Optional[DayLike] = None) -> float:
    reference = parse_day(day if day is not None else date.today())
    start = start_of_year(reference)
    end = end_of_year(reference)

    total = sum(
        _to_main(_occurrences(sub, start, end) * sub.amount, sub, settings, rates)
        for sub in _active(subscriptions)
    )
    return round_currency(total, settings.round_whole_numbers)


def calculate_category_totals(subscriptions: Iterable[Subscription], categories: Iterable[Category],
                              settings: Settings, rates: CurrencyRates) -> List[Tuple[Category, float]]:
    """Annualized spend per category, largest first; empty categories are left out."""
    active = _active(subscriptions)
    result = []
    for category in categories:
        members = [s for s in active if s.category_id == category.id]
        total = _yearly_run_rate(members, settings, rates)
        if total > 0:
            result.append((category, round_currency(total, settings.round_whole_numbers)))

    return sorted(result, key=lambda item: item[1], reverse=True)
