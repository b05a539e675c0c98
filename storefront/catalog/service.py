import re
from datetime import datetime, timezone

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Query, Session

from ..errors import NotFound, ValidationFailed
from .models import Category, Product, Promo
from .pricing import PROMO_PERCENTAGE, PROMO_TYPES, as_utc

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    return _NON_ALNUM.sub("-", (text or "").lower()).strip("-")


def validate_promo(type_: str, value: float, start_date: datetime, end_date: datetime) -> None:
    if type_ not in PROMO_TYPES:
        raise ValidationFailed("Invalid promo type")
    if value is None or value < 0:
        raise ValidationFailed("Promo value cannot be negative")
    if type_ == PROMO_PERCENTAGE and value > 100:
        raise ValidationFailed("Percentage promo value cannot exceed 100")
    if as_utc(end_date) <= as_utc(start_date):
        raise ValidationFailed("End date must be after start date")


def validate_product_prices(price: int, price_after_discount: int | None) -> None:
    if price is None or price < 0:
        raise ValidationFailed("Price cannot be negative")
    if price_after_discount is None:
        return
    if price_after_discount < 0:
        raise ValidationFailed("Discounted price cannot be negative")
    if price_after_discount >= price:
        raise ValidationFailed("Discounted price must be less than original price")


def get_category(db: Session, category_id: str) -> Category:
    c = db.query(Category).filter(Category.id == category_id).first()
    if not c:
        raise NotFound("Category not found")
    return c


def get_promo(db: Session, promo_id: str) -> Promo:
    p = db.query(Promo).filter(Promo.id == promo_id).first()
    if not p:
        raise NotFound("Promo not found")
    return p


def get_product(db: Session, product_id: str) -> Product:
    p = db.query(Product).filter(Product.id == product_id).first()
    if not p:
        raise NotFound("Product not found")
    return p


def filter_promos_by_status(
    q: Query,
    status: str | None,
    now: datetime | None = None,
    inactive_is_expired: bool = False,
) -> Query:
    """active | inactive | expired; anything else leaves the query alone."""
    now = as_utc(now or datetime.now(timezone.utc))
    if status == "active":
        return q.filter(Promo.is_active == True, Promo.start_date <= now, Promo.end_date >= now)  # noqa: E712
    if status == "inactive":
        return q.filter(Promo.is_active == False)  # noqa: E712
    if status == "expired":
        if inactive_is_expired:
            return q.filter(or_(Promo.end_date < now, Promo.is_active == False))  # noqa: E712
        return q.filter(Promo.end_date < now)
    return q


def search_products(q: Query, search: str) -> Query:
    like = f"%{search.lower()}%"
    return q.filter(or_(
        Product.name.ilike(like),
        Product.description.ilike(like),
        cast(Product.tags, String).ilike(like),
    ))
