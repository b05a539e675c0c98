from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFound
from ..pagination import paginate
from .models import Category, Product, Promo
from .schemas import category_out, product_out, promo_out
from .service import filter_promos_by_status, search_products

router = APIRouter(prefix="/api")

PRODUCT_SORTS = {
    "created_at": Product.created_at,
    "price": Product.price,
    "views": Product.views,
    "name": Product.name,
}


def _published_products(db: Session):
    return db.query(Product).filter(Product.is_published == True)  # noqa: E712


@router.get("/products")
def products_list(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=100),
    category: str | None = Query(default=None),
    search: str | None = Query(default=None),
    promo: bool = Query(default=False),
    min_price: int | None = Query(default=None, ge=0),
    max_price: int | None = Query(default=None, ge=0),
    sort: str = Query(default="created_at"),
    order: str = Query(default="desc"),
    db: Session = Depends(get_db),
):
    q = _published_products(db)

    if category:
        cat = db.query(Category).filter(Category.slug == category).first()
        if cat:
            q = q.filter(Product.category_id == cat.id)
    if search:
        q = search_products(q, search)
    if promo:
        q = q.filter(Product.promo_id.is_not(None))
    if min_price is not None:
        q = q.filter(Product.price >= min_price)
    if max_price is not None:
        q = q.filter(Product.price <= max_price)

    col = PRODUCT_SORTS.get(sort, Product.created_at)
    q = q.order_by(col.asc() if order == "asc" else col.desc())

    now = datetime.now(timezone.utc)
    products, pagination = paginate(q, page, limit)
    return {
        "success": True,
        "data": {"products": [product_out(p, now) for p in products], "pagination": pagination},
    }


@router.get("/products/{slug}")
def products_get(slug: str, db: Session = Depends(get_db)):
    p = _published_products(db).filter(Product.slug == slug).first()
    if not p:
        raise NotFound("Product not found")

    related = (
        _published_products(db)
        .filter(Product.category_id == p.category_id, Product.id != p.id)
        .limit(4)
        .all()
    )
    now = datetime.now(timezone.utc)
    return {
        "success": True,
        "data": {"product": product_out(p, now), "related_products": [product_out(r, now) for r in related]},
    }


@router.get("/categories")
def categories_list(db: Session = Depends(get_db)):
    counts = dict(
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.is_published == True)  # noqa: E712
        .group_by(Product.category_id)
        .all()
    )
    cats = db.query(Category).order_by(Category.name.asc()).all()
    data = []
    for c in cats:
        item = category_out(c)
        item["product_count"] = counts.get(c.id, 0)
        data.append(item)
    return {"success": True, "data": data}


@router.get("/categories/{slug}")
def categories_get(slug: str, db: Session = Depends(get_db)):
    c = db.query(Category).filter(Category.slug == slug).first()
    if not c:
        raise NotFound("Category not found")
    return {"success": True, "data": category_out(c)}


@router.get("/promos")
def promos_list(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    type: str | None = Query(default=None),
    status: str | None = Query(default=None),
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    now = datetime.now(timezone.utc)
    q = db.query(Promo)

    if active_only:
        q = filter_promos_by_status(q, "active", now)
    else:
        if type and type != "all":
            q = q.filter(Promo.type == type)
        q = filter_promos_by_status(q, status, now, inactive_is_expired=True)

    q = q.order_by(Promo.start_date.desc())
    promos, pagination = paginate(q, page, limit)

    data = []
    for p in promos:
        item = promo_out(p, now)
        item["product_count"] = sum(1 for prod in p.products if prod.is_published)
        data.append(item)
    return {"success": True, "data": {"promos": data, "pagination": pagination}}
