import pytest

from subtracker.domain import Category, CurrencyRates, Settings, Subscription
from subtracker.totals import (
    calculate_average_monthly,
    calculate_category_totals,
    calculate_monthly_total,
    calculate_total_spent,
    calculate_year_to_date_total,
    calculate_yearly_forecast,
    get_monthly_equivalent,
)

RATES = CurrencyRates(base="USD", rates={"EUR": 0.9})
SETTINGS = Settings(main_currency="USD", round_whole_numbers=False)
WHOLE = Settings(main_currency="USD", round_whole_numbers=True)


def make_sub(id, amount, anchor, schedule_type="monthly", currency="USD", status="active",
             interval_count=1, interval_unit=None, status_changed_at=None, category_id=None):
    return Subscription(
        id=id,
        name=id,
        amount=amount,
        currency=currency,
        billing_anchor=anchor,
        start_date=anchor,
        schedule_type=schedule_type,
        interval_count=interval_count,
        interval_unit=interval_unit,
        status=status,
        status_changed_at=status_changed_at,
        category_id=category_id,
    )


def make_sample():
    return (
        make_sub("weekly", 10, "2024-01-01", schedule_type="weekly"),
        make_sub("monthly", 15, "2024-01-15"),
        make_sub("euro", 9, "2024-01-20", currency="EUR"),
        make_sub("paused", 100, "2024-01-05", status="paused"),
    )


def test_monthly_equivalent_per_schedule():
    assert get_monthly_equivalent(make_sub("w", 10, "2024-01-01", schedule_type="weekly")) == pytest.approx(43.3333, abs=1e-4)
    assert get_monthly_equivalent(make_sub("y", 120, "2024-01-01", schedule_type="yearly")) == pytest.approx(10)
    assert get_monthly_equivalent(
        make_sub("cw", 10, "2024-01-01", schedule_type="custom", interval_count=2, interval_unit="week")
    ) == pytest.approx(21.6667, abs=1e-4)
    assert get_monthly_equivalent(
        make_sub("cm", 30, "2024-01-01", schedule_type="custom", interval_count=3, interval_unit="month")
    ) == pytest.approx(10)
    assert get_monthly_equivalent(make_sub("m", 12, "2024-01-01", interval_count=0)) == 12


def test_monthly_total_counts_occurrences():
    # five Mondays in January 2024
    assert calculate_monthly_total(make_sample(), "2024-01-10", SETTINGS, RATES) == 75


def test_monthly_total_skips_inactive():
    subs = (make_sub("paused", 100, "2024-01-05", status="paused"),)
    assert calculate_monthly_total(subs, "2024-01-10", SETTINGS, RATES) == 0


def test_monthly_total_before_anchor_is_zero():
    assert calculate_monthly_total(make_sample(), "2023-12-01", SETTINGS, RATES) == 0


def test_yearly_forecast_is_run_rate():
    assert calculate_yearly_forecast(make_sample(), SETTINGS, RATES) == pytest.approx(820)


def test_average_monthly_rounds_after_division():
    assert calculate_average_monthly(make_sample(), SETTINGS, RATES) == 68.33
    assert calculate_average_monthly(make_sample(), WHOLE, RATES) == 68


def test_average_monthly_divides_unrounded_run_rate():
    subs = (make_sub("y", 17.6, "2024-01-01", schedule_type="yearly"),)
    assert calculate_yearly_forecast(subs, WHOLE, RATES) == 18
    # 17.6 / 12 = 1.47, not 18 / 12 = 1.5
    assert calculate_average_monthly(subs, WHOLE, RATES) == 1


def test_monthly_total_and_run_rate_differ_for_weekly():
    subs = (make_sub("weekly", 10, "2024-01-01", schedule_type="weekly"),)
    assert calculate_monthly_total(subs, "2024-01-01", SETTINGS, RATES) == 50
    assert calculate_monthly_total(subs, "2024-02-01", SETTINGS, RATES) == 40
    assert calculate_average_monthly(subs, SETTINGS, RATES) == 43.33


def test_monthly_total_for_long_running_weekly_plan():
    subs = (make_sub("old", 10, "1980-01-07", schedule_type="weekly"),)
    assert calculate_monthly_total(subs, "2024-01-15", SETTINGS, RATES) == 50


def test_empty_list_gives_zero():
    assert calculate_monthly_total((), "2024-01-01", SETTINGS, RATES) == 0
    assert calculate_yearly_forecast((), SETTINGS, RATES) == 0
    assert calculate_average_monthly((), SETTINGS, RATES) == 0
    assert calculate_year_to_date_total((), SETTINGS, RATES, "2024-05-10") == 0


def test_total_spent_active_until_now():
    sub = make_sub("m", 10, "2024-01-15")
    assert calculate_total_spent(sub, SETTINGS, RATES, now="2024-06-20") == 60


def test_total_spent_stops_at_status_change():
    sub = make_sub("m", 10, "2024-01-15", status="canceled", status_changed_at="2024-03-20T10:00:00Z")
    assert calculate_total_spent(sub, SETTINGS, RATES, now="2024-06-20") == 30


def test_total_spent_without_status_timestamp_runs_to_now():
    sub = make_sub("m", 10, "2024-01-15", status="paused")
    assert calculate_total_spent(sub, SETTINGS, RATES, now="2024-03-15") == 30


def test_total_spent_is_converted():
    sub = make_sub("e", 9, "2024-01-15", currency="EUR")
    assert calculate_total_spent(sub, SETTINGS, RATES, now="2024-02-15") == 20


def test_year_to_date_counts_whole_calendar_year():
    subs = (
        make_sub("m", 10, "2023-11-05"),
        make_sub("y", 100, "2022-08-01", schedule_type="yearly", currency="EUR"),
        make_sub("c", 50, "2023-11-05", status="canceled"),
    )
    assert calculate_year_to_date_total(subs, SETTINGS, RATES, "2024-05-10") == 231.11
    assert calculate_year_to_date_total(subs, WHOLE, RATES, "2024-05-10") == 231


def test_category_totals_sorted_and_filtered():
    cats = (
        Category("c1", "Entertainment"),
        Category("c2", "Utilities"),
        Category("c3", "Health"),
    )
    subs = (
        make_sub("a", 10, "2024-01-01", category_id="c1"),
        make_sub("b", 60, "2024-01-01", schedule_type="yearly", category_id="c2"),
        make_sub("x", 500, "2024-01-01", status="canceled", category_id="c2"),
        make_sub("u", 5, "2024-01-01", category_id="missing"),
    )
    totals = calculate_category_totals(subs, cats, SETTINGS, RATES)
    assert [(c.id, total) for c, total in totals] == [("c1", 120), ("c2", 60)]
