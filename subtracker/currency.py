import logging
from decimal import ROUND_HALF_UP, Decimal, localcontext

from subtracker.domain import CurrencyRates
from subtracker.functional import safe_rate

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "TRY": "₺",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "KRW": "₩",
    "RUB": "₽",
    "UAH": "₴",
    "KZT": "₸",
    "PLN": "zł",
    "BRL": "R$",
    "CAD": "CA$",
    "AUD": "A$",
    "CHF": "CHF ",
}

_CENT = Decimal("0.01")
_UNIT = Decimal("1")


def _to_base(amount: float, code: str, rates: CurrencyRates) -> float:
    if code == rates.base:
        return amount
    rate = safe_rate(rates, code)
    if rate.is_none():
        logger.debug("No rate for %s, keeping amount unconverted", code)
    return amount / rate.get_or_else(1)


def _from_base(amount: float, code: str, rates: CurrencyRates) -> float:
    if code == rates.base:
        return amount
    rate = safe_rate(rates, code)
    if rate.is_none():
        logger.debug("No rate for %s, keeping amount unconverted", code)
    return amount * rate.get_or_else(1)


def convert_currency(amount: float, from_code: str, to_code: str, rates: CurrencyRates) -> float:
    """Convert `amount` through the base currency of `rates`.

    Same-code conversion returns `amount` untouched. A currency missing from
    the table converts 1:1 on its leg instead of raising.
    """
    if from_code == to_code:
        return amount
    return _from_base(_to_base(amount, from_code, rates), to_code, rates)


def round_currency(amount: float, round_whole_numbers: bool) -> float:
    """Round half away from zero to whole units or to cents (43.335 -> 43.34)."""
    quantum = _UNIT if round_whole_numbers else _CENT
    with localcontext() as ctx:
        # room for the integer digits of any finite float plus the cents
        ctx.prec = 400
        return float(Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP))


def currency_symbol(code: str) -> str:
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_amount(value: float, currency: str, round_whole_numbers: bool) -> str:
    """Format with currency symbol, e.g. "$50.00" or "₺24"."""
    digits = 0 if round_whole_numbers else 2
    rounded = round_currency(value, round_whole_numbers)
    return f"{currency_symbol(currency)}{rounded:,.{digits}f}"
