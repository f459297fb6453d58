from datetime import date
from itertools import islice

from subtracker.domain import Category, Subscription
from subtracker.lazy import iter_upcoming_payments, lazy_top_categories


def make_sub(id, anchor, schedule_type="monthly", status="active"):
    return Subscription(
        id=id,
        name=id,
        amount=5.0,
        currency="USD",
        billing_anchor=anchor,
        start_date=anchor,
        schedule_type=schedule_type,
        status=status,
    )


def test_upcoming_payments_merge_in_date_order():
    subs = (
        make_sub("monthly", "2024-01-10"),
        make_sub("weekly", "2024-01-01", schedule_type="weekly"),
        make_sub("paused", "2024-01-02", status="paused"),
    )
    result = [(d, s.id) for d, s in iter_upcoming_payments(subs, "2024-01-01", "2024-01-31")]

    assert result == [
        (date(2024, 1, 1), "weekly"),
        (date(2024, 1, 8), "weekly"),
        (date(2024, 1, 10), "monthly"),
        (date(2024, 1, 15), "weekly"),
        (date(2024, 1, 22), "weekly"),
        (date(2024, 1, 29), "weekly"),
    ]


def test_upcoming_payments_is_lazy():
    subs = (make_sub("weekly", "2024-01-01", schedule_type="weekly"),)
    first_two = list(islice(iter_upcoming_payments(subs, "2024-01-01", "2099-12-31"), 2))
    assert [d for d, _ in first_two] == [date(2024, 1, 1), date(2024, 1, 8)]


def test_lazy_top_categories():
    totals = [(Category("c1", "Entertainment"), 300.0), (Category("c2", "Health"), 120.0)]
    assert list(lazy_top_categories(totals, 1)) == [("Entertainment", 300.0)]
    assert list(lazy_top_categories(totals, 5)) == [("Entertainment", 300.0), ("Health", 120.0)]
    assert list(lazy_top_categories(totals, -1)) == []
