from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

from subtracker.dates import parse_day
from subtracker.domain import CurrencyRates, Subscription
from subtracker.exceptions import DateParseError

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Some(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f):
        return self

    def bind(self, f):
        return self

    def get_or_else(self, default):
        return default

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Right(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def get_error(self):
        raise ValueError("Right holds no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f):
        return self

    def bind(self, f):
        return self

    def get_or_else(self, default):
        return default

    def get_error(self):
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def safe_rate(rates: CurrencyRates, code: str) -> Maybe[float]:
    """Rate of `code` against the base, or Nothing when missing or unusable."""
    rate = (rates.rates or {}).get(code)
    if not rate or rate <= 0:
        return Nothing()
    return Some(rate)


def _check_date(sub: Subscription, field_name: str) -> Either[dict, Subscription]:
    value = getattr(sub, field_name)
    try:
        parse_day(value)
    except DateParseError:
        return Left({
            "error": "invalid_date",
            "message": f"{field_name} of subscription {sub.id} is not a valid date",
            "field": field_name,
            "value": value,
        })
    return Right(sub)


def _check_amount(sub: Subscription) -> Either[dict, Subscription]:
    if sub.amount < 0:
        return Left({
            "error": "negative_amount",
            "message": f"Subscription {sub.id} cannot have a negative amount",
            "amount": sub.amount,
        })
    return Right(sub)


def validate_subscription(sub: Subscription) -> Either[dict, Subscription]:
    """Check a subscription before it enters the schedule engine; first failure wins.

    Unknown schedule types and custom schedules without a unit pass: the
    engine steps them by months.
    """
    return (
        _check_amount(sub)
        .bind(lambda s: _check_date(s, "billing_anchor"))
        .bind(lambda s: _check_date(s, "start_date"))
    )
