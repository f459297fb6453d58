import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from subtracker.dates import DayLike, end_of_month, parse_day, start_of_month
from subtracker.domain import ACTIVE, Category, CurrencyRates, Settings, Subscription
from subtracker.functional import validate_subscription
from subtracker.lazy import iter_upcoming_payments
from subtracker.totals import (
    calculate_average_monthly,
    calculate_category_totals,
    calculate_monthly_total,
    calculate_year_to_date_total,
    calculate_yearly_forecast,
)

logger = logging.getLogger(__name__)

HomeCalculator = Callable[[date, Sequence[Subscription], Settings, CurrencyRates, Dict[str, Any]], Dict[str, Any]]
AnalyticsCalculator = Callable[
    [Sequence[Subscription], Sequence[Category], Settings, CurrencyRates, date, Dict[str, Any]], Dict[str, Any]
]


def split_valid(subscriptions: Iterable[Subscription]) -> Tuple[List[Subscription], List[dict]]:
    """Partition subscriptions into the valid ones and the validation errors of the rest."""
    valid, errors = [], []
    for sub in subscriptions:
        checked = validate_subscription(sub)
        if checked.is_right():
            valid.append(sub)
        else:
            errors.append(checked.get_error())
    if errors:
        logger.warning("Skipping %d invalid subscriptions", len(errors))
    return valid, errors


def _name(func) -> str:
    return getattr(func, "__name__", str(func))


class HomeService:
    """Facade for the home screen: monthly figures and the payment calendar.

    calculators: sequence of functions taking
        (month_date, subscriptions, settings, rates, acc) -> dict (partial results)
    """

    def __init__(self, calculators: Sequence[HomeCalculator]):
        self.calculators = calculators

    def summary(self, month_date: DayLike, subscriptions: Iterable[Subscription],
                settings: Settings, rates: CurrencyRates) -> Dict[str, Any]:
        month = start_of_month(month_date)
        valid, errors = split_valid(subscriptions)
        report = {"month": month.strftime("%Y-%m"), "validation": errors, "steps": [], "result": {}}

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(month, valid, settings, rates, acc)
            report["steps"].append({"calculator": _name(calc), "output": out})
            acc.update(out)

        report["result"] = acc
        return report


class AnalyticsService:
    """Facade for the analytics screen, built from injected calculators."""

    def __init__(self, calculators: Sequence[AnalyticsCalculator]):
        self.calculators = calculators

    def report(self, subscriptions: Iterable[Subscription], categories: Iterable[Category],
               settings: Settings, rates: CurrencyRates, day: Optional[DayLike] = None) -> Dict[str, Any]:
        reference = parse_day(day if day is not None else date.today())
        valid, errors = split_valid(subscriptions)
        cats = tuple(categories)
        report = {"date": reference.isoformat(), "validation": errors, "steps": [], "result": {}}

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(valid, cats, settings, rates, reference, acc)
            report["steps"].append({"calculator": _name(calc), "output": out})
            acc.update(out)

        report["result"] = acc
        return report


def monthly_total_calc(month, subscriptions, settings, rates, acc):
    return {"monthly_total": calculate_monthly_total(subscriptions, month, settings, rates)}


def average_monthly_calc(month, subscriptions, settings, rates, acc):
    return {"average_monthly": calculate_average_monthly(subscriptions, settings, rates)}


def payment_calendar_calc(month, subscriptions, settings, rates, acc):
    calendar: Dict[str, List[str]] = {}
    for day, sub in iter_upcoming_payments(subscriptions, month, end_of_month(month)):
        calendar.setdefault(day.isoformat(), []).append(sub.id)
    return {"calendar": calendar}


def active_count_calc(subscriptions, categories, settings, rates, day, acc):
    return {"active_count": sum(1 for s in subscriptions if s.status == ACTIVE)}


def yearly_forecast_calc(subscriptions, categories, settings, rates, day, acc):
    return {"yearly_forecast": calculate_yearly_forecast(subscriptions, settings, rates)}


def average_monthly_analytics_calc(subscriptions, categories, settings, rates, day, acc):
    return {"average_monthly": calculate_average_monthly(subscriptions, settings, rates)}


def year_to_date_calc(subscriptions, categories, settings, rates, day, acc):
    return {"year_to_date": calculate_year_to_date_total(subscriptions, settings, rates, day)}


def category_totals_calc(subscriptions, categories, settings, rates, day, acc):
    totals = calculate_category_totals(subscriptions, categories, settings, rates)
    return {
        "category_totals": [
            {"id": c.id, "name": c.name, "color": c.color, "total": total} for c, total in totals
        ]
    }


DEFAULT_HOME_CALCULATORS = (monthly_total_calc, average_monthly_calc, payment_calendar_calc)
DEFAULT_ANALYTICS_CALCULATORS = (
    active_count_calc,
    yearly_forecast_calc,
    average_monthly_analytics_calc,
    year_to_date_calc,
    category_totals_calc,
)
