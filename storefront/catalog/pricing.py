"""
Promotion pricing.

Prices are whole currency units. Discounted amounts are rounded to the
nearest unit with ties away from zero (ROUND_HALF_UP on non-negative
values), so the same product always quotes the same price.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

PROMO_PERCENTAGE = "percentage"
PROMO_FIXED = "fixed"
PROMO_TYPES = (PROMO_PERCENTAGE, PROMO_FIXED)

_HUNDRED = Decimal(100)


def as_utc(dt: datetime) -> datetime:
    """
    Aware datetimes are converted to UTC. Naive ones are taken to be UTC
    already, which is how SQLite hands stored values back.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def round_currency(amount) -> int:
    return int(Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def is_currently_active(promo, now: datetime | None = None) -> bool:
    if promo is None:
        return False
    now = as_utc(now or datetime.now(timezone.utc))
    return bool(promo.is_active) and as_utc(promo.start_date) <= now <= as_utc(promo.end_date)


def effective_price(product, promo=None, now: datetime | None = None) -> int:
    """
    Price a visitor is quoted for ``product``.

    Without a currently active promo the pre-set discounted price wins over
    the base price. An active promo is applied to the base price; the
    result never goes below zero.
    """
    if product.price_after_discount is not None:
        listed = int(product.price_after_discount)
    else:
        listed = int(product.price)

    if promo is None or not is_currently_active(promo, now):
        return listed

    price = Decimal(str(product.price))
    value = Decimal(str(promo.value or 0))

    if promo.type == PROMO_PERCENTAGE:
        value = min(max(value, Decimal(0)), _HUNDRED)
        discounted = price * (_HUNDRED - value) / _HUNDRED
    elif promo.type == PROMO_FIXED:
        discounted = price - max(value, Decimal(0))
    else:
        return listed

    return max(0, round_currency(discounted))


def discount_amount(product, promo=None, now: datetime | None = None) -> int:
    return max(0, int(product.price) - effective_price(product, promo, now))
