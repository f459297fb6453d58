from datetime import date, datetime
from typing import Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from subtracker.exceptions import DateParseError

DayLike = Union[date, datetime, str]


def parse_day(value: DayLike) -> date:
    """Return the calendar day of `value`, dropping any time of day.

    Accepts a date, a datetime or an ISO 8601 string. Anything else raises
    DateParseError; no default is ever substituted.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return isoparse(value.strip()).date()
        except (ValueError, OverflowError) as e:
            raise DateParseError(value, e) from e
    raise DateParseError(value)


def start_of_month(value: DayLike) -> date:
    return parse_day(value).replace(day=1)


def end_of_month(value: DayLike) -> date:
    # day=31 clamps to the last day of the month
    return parse_day(value) + relativedelta(day=31)


def start_of_year(value: DayLike) -> date:
    return parse_day(value).replace(month=1, day=1)


def end_of_year(value: DayLike) -> date:
    return parse_day(value).replace(month=12, day=31)
