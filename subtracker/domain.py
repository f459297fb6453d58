from dataclasses import dataclass, field
from typing import Dict, Optional

MONTHLY = "monthly"
YEARLY = "yearly"
WEEKLY = "weekly"
CUSTOM = "custom"
SCHEDULE_TYPES = (MONTHLY, YEARLY, WEEKLY, CUSTOM)

WEEK = "week"
MONTH = "month"
INTERVAL_UNITS = (WEEK, MONTH)

ACTIVE = "active"
PAUSED = "paused"
CANCELED = "canceled"
STATUSES = (ACTIVE, PAUSED, CANCELED)


@dataclass(frozen=True)
class Subscription:
    id: str
    name: str
    amount: float
    currency: str
    billing_anchor: str                  # "YYYY-MM-DD", seed of every occurrence
    start_date: str                      # "YYYY-MM-DD"
    schedule_type: str = MONTHLY         # monthly | yearly | weekly | custom
    interval_count: int = 1
    interval_unit: Optional[str] = None  # week | month, custom only
    status: str = ACTIVE                 # active | paused | canceled
    status_changed_at: Optional[str] = None
    category_id: Optional[str] = None
    list_id: Optional[str] = None


@dataclass(frozen=True)
class CurrencyRates:
    base: str
    rates: Dict[str, float] = field(default_factory=dict)  # units per 1 base
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    main_currency: str = "USD"
    round_whole_numbers: bool = False


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    color: str = "#9CA3AF"
