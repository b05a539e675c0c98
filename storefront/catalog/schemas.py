from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..settings import settings
from .pricing import as_utc, discount_amount, effective_price, is_currently_active


class CategoryIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str | None = None
    description: str = Field(default="", max_length=500)
    image: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    slug: str | None = None
    description: str | None = Field(default=None, max_length=500)
    image: str | None = None


class PromoIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    type: str = "percentage"
    value: float
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    min_purchase: float = Field(default=0, ge=0)
    max_discount: float = Field(default=0, ge=0)
    usage_limit: int = Field(default=0, ge=0)
    image: str = ""
    product_ids: list[str] = []

    # SQLite drops the offset on write, so only UTC values are stored
    @field_validator("start_date", "end_date")
    @classmethod
    def _dates_to_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class PromoUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    type: str | None = None
    value: float | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool | None = None
    min_purchase: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    usage_limit: int | None = Field(default=None, ge=0)
    image: str | None = None
    product_ids: list[str] | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _dates_to_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else None


class ProductIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    slug: str | None = None
    sku: str = Field(min_length=1, max_length=64)
    description: str = Field(min_length=1, max_length=2000)
    price: int = Field(ge=0)
    price_after_discount: int | None = Field(default=None, ge=0)
    images: list[str] = []
    category_id: str
    tags: list[str] = []
    stock: int = Field(default=0, ge=0)
    is_published: bool = True
    promo_id: str | None = None


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = None
    sku: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    price: int | None = Field(default=None, ge=0)
    price_after_discount: int | None = Field(default=None, ge=0)
    images: list[str] | None = None
    category_id: str | None = None
    tags: list[str] | None = None
    stock: int | None = Field(default=None, ge=0)
    is_published: bool | None = None
    promo_id: str | None = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    description: str = ""
    image: str | None = None


class PromoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    slug: str
    description: str = ""
    type: str
    value: float
    start_date: datetime
    end_date: datetime
    is_active: bool
    min_purchase: float = 0
    max_discount: float = 0
    usage_limit: int = 0
    usage_count: int = 0
    image: str = ""
    created_at: datetime | None = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    sku: str
    description: str
    price: int
    price_after_discount: int | None = None
    images: list[str] = []
    tags: list[str] = []
    stock: int = 0
    views: int = 0
    is_published: bool = True
    category_id: str
    promo_id: str | None = None
    created_at: datetime | None = None


def category_out(c) -> dict:
    return CategoryOut.model_validate(c).model_dump(mode="json")


def promo_out(p, now: datetime | None = None) -> dict:
    data = PromoOut.model_validate(p).model_dump(mode="json")
    data["currently_active"] = is_currently_active(p, now)
    return data


def product_out(p, now: datetime | None = None) -> dict:
    """Product plus the derived pricing fields every reader needs."""
    data = ProductOut.model_validate(p).model_dump(mode="json")
    data["category"] = category_out(p.category) if p.category else None
    data["promo"] = promo_out(p.promo, now) if p.promo else None
    data["promo_active"] = is_currently_active(p.promo, now)
    data["effective_price"] = effective_price(p, p.promo, now)
    data["discount_amount"] = discount_amount(p, p.promo, now)
    data["is_popular"] = p.is_popular(settings.popular_threshold)
    data["is_in_stock"] = p.is_in_stock()
    return data
