import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional, Tuple

from subtracker.config import DEFAULT_MAIN_CURRENCY
from subtracker.dates import DayLike, parse_day
from subtracker.domain import ACTIVE, Category, CurrencyRates, Settings, Subscription
from subtracker.exceptions import SeedLoadError
from subtracker.schedule import is_payment_due_on_date

logger = logging.getLogger(__name__)


def _subscription_from_json(raw: dict) -> Subscription:
    return Subscription(
        id=raw["id"],
        name=raw.get("name", ""),
        amount=float(raw.get("amount", 0)),
        currency=raw["currency"],
        billing_anchor=raw["billingAnchor"],
        start_date=raw.get("startDate", raw["billingAnchor"]),
        schedule_type=raw.get("scheduleType", "monthly"),
        interval_count=raw.get("intervalCount") or 1,
        interval_unit=raw.get("intervalUnit"),
        status=raw.get("status", ACTIVE),
        status_changed_at=raw.get("statusChangedAt"),
        category_id=raw.get("categoryId"),
        list_id=raw.get("listId"),
    )


def load_seed(
    path: str,
) -> Tuple[
    Tuple[Category, ...],
    Tuple[Subscription, ...],
    Settings,
    CurrencyRates,
]:
    """Read a JSON snapshot as persisted by the mobile app (camelCase keys)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SeedLoadError(f"Cannot read seed file {path}: {e}") from e

    try:
        categories = tuple(
            Category(id=c["id"], name=c["name"], color=c.get("color", "#9CA3AF"))
            for c in data.get("categories", [])
        )
        subscriptions = tuple(_subscription_from_json(s) for s in data.get("subscriptions", []))

        raw_settings = data.get("settings", {})
        settings = Settings(
            main_currency=raw_settings.get("mainCurrency", DEFAULT_MAIN_CURRENCY),
            round_whole_numbers=bool(raw_settings.get("roundWholeNumbers", False)),
        )

        raw_rates = data.get("currencyRates", {})
        rates = CurrencyRates(
            base=raw_rates.get("base", settings.main_currency),
            rates=dict(raw_rates.get("rates", {})),
            updated_at=raw_rates.get("updatedAt"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SeedLoadError(f"Malformed seed file {path}: {e}") from e

    logger.info("Loaded %d subscriptions and %d categories from %s", len(subscriptions), len(categories), path)
    return categories, subscriptions, settings, rates


def add_subscription(
    subs: Tuple[Subscription, ...], sub: Subscription
) -> Tuple[Subscription, ...]:
    return subs + (sub,)


def update_subscription(
    subs: Tuple[Subscription, ...], updated: Subscription
) -> Tuple[Subscription, ...]:
    return tuple(updated if s.id == updated.id else s for s in subs)


def change_status(sub: Subscription, status: str, at: Optional[datetime] = None) -> Subscription:
    """New subscription with `status` and a fresh status_changed_at; the anchor is untouched."""
    if status == sub.status:
        return sub
    changed_at = (at or datetime.now(timezone.utc)).isoformat()
    return replace(sub, status=status, status_changed_at=changed_at)


def active_subscriptions(subs: Tuple[Subscription, ...]) -> Tuple[Subscription, ...]:
    return tuple(filter(lambda s: s.status == ACTIVE, subs))


def filter_subscriptions(
    subs: Tuple[Subscription, ...], list_id: Optional[str] = None, query: str = ""
) -> Tuple[Subscription, ...]:
    """Active subscriptions, optionally narrowed to one list and a name search."""
    needle = query.strip().lower()
    return tuple(
        s for s in active_subscriptions(subs)
        if (list_id is None or s.list_id == list_id)
        and (not needle or needle in s.name.lower())
    )


def subscriptions_due_on(subs: Tuple[Subscription, ...], day: DayLike) -> Tuple[Subscription, ...]:
    target = parse_day(day)
    return tuple(s for s in active_subscriptions(subs) if is_payment_due_on_date(s, target))
