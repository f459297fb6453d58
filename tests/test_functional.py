from subtracker.domain import CurrencyRates, Subscription
from subtracker.functional import (
    Left, Maybe, Nothing, Right, Some, safe_rate, validate_subscription,
)


def make_sub(**overrides):
    fields = dict(
        id="s1",
        name="Netflix",
        amount=15.49,
        currency="USD",
        billing_anchor="2024-01-15",
        start_date="2024-01-15",
    )
    fields.update(overrides)
    return Subscription(**fields)


def test_maybe_map_and_bind():
    assert Some(5).map(lambda x: x * 2) == Some(10)
    assert Nothing().map(lambda x: x * 2).is_none()

    def half(x: int) -> Maybe[int]:
        return Nothing() if x % 2 else Some(x // 2)

    assert Some(4).bind(half).get_or_else(0) == 2
    assert Some(3).bind(half).is_none()
    assert Nothing().get_or_else(7) == 7


def test_either_short_circuits():
    right = Right(5).map(lambda x: x + 1)
    assert right.is_right()
    assert right.get_or_else(0) == 6

    left = Left("boom").map(lambda x: x + 1).bind(lambda x: Right(x))
    assert left.is_left()
    assert left.get_error() == "boom"
    assert left.get_or_else(0) == 0


def test_safe_rate():
    rates = CurrencyRates(base="USD", rates={"EUR": 0.9, "BAD": 0})
    assert safe_rate(rates, "EUR") == Some(0.9)
    assert safe_rate(rates, "BAD").is_none()
    assert safe_rate(rates, "GBP").is_none()


def test_validate_valid_subscription():
    sub = make_sub()
    assert validate_subscription(sub) == Right(sub)


def test_validate_rejects_negative_amount():
    result = validate_subscription(make_sub(amount=-1))
    assert result.is_left()
    assert result.get_error()["error"] == "negative_amount"


def test_validate_accepts_unknown_schedule():
    sub = make_sub(schedule_type="daily")
    assert validate_subscription(sub) == Right(sub)


def test_validate_accepts_custom_without_unit():
    sub = make_sub(schedule_type="custom", interval_unit=None)
    assert validate_subscription(sub) == Right(sub)


def test_validate_rejects_bad_dates():
    anchor = validate_subscription(make_sub(billing_anchor="not-a-date"))
    assert anchor.get_error()["field"] == "billing_anchor"

    start = validate_subscription(make_sub(start_date="2024-02-30"))
    assert start.get_error()["field"] == "start_date"
