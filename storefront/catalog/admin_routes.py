import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import update
from sqlalchemy.orm import Session

from ..auth.session import require_admin
from ..db import get_db
from ..errors import Conflict, NotFound
from ..pagination import paginate
from .models import Category, Product, Promo
from .schemas import (
    CategoryIn,
    CategoryUpdate,
    ProductIn,
    ProductUpdate,
    PromoIn,
    PromoUpdate,
    category_out,
    product_out,
    promo_out,
)
from .service import (
    filter_promos_by_status,
    get_category,
    get_product,
    get_promo,
    search_products,
    slugify,
    validate_product_prices,
    validate_promo,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])


# ────────────────────────────────────────────
# Categories
# ────────────────────────────────────────────

def _unique_category_slug(db: Session, slug: str, exclude_id: str | None = None) -> str:
    q = db.query(Category).filter(Category.slug == slug)
    if exclude_id:
        q = q.filter(Category.id != exclude_id)
    if q.first():
        raise Conflict("Category with this slug already exists")
    return slug


@router.get("/categories")
def admin_categories_list(db: Session = Depends(get_db)):
    cats = db.query(Category).order_by(Category.created_at.desc()).all()
    return {"success": True, "data": [category_out(c) for c in cats]}


@router.post("/categories", status_code=201)
def admin_categories_create(body: CategoryIn, db: Session = Depends(get_db)):
    slug = _unique_category_slug(db, slugify(body.slug or body.name))
    c = Category(name=body.name.strip(), slug=slug, description=body.description.strip(), image=body.image)
    db.add(c)
    db.commit()
    db.refresh(c)
    log.info("Created category %s", c.slug)
    return {"success": True, "data": category_out(c), "message": "Category created successfully"}


@router.put("/categories/{category_id}")
def admin_categories_update(category_id: str, body: CategoryUpdate, db: Session = Depends(get_db)):
    c = get_category(db, category_id)
    changes = body.model_dump(exclude_unset=True)

    if "name" in changes and changes["name"] is not None:
        c.name = changes["name"].strip()
    if changes.get("slug"):
        c.slug = _unique_category_slug(db, slugify(changes["slug"]), exclude_id=c.id)
    if "description" in changes and changes["description"] is not None:
        c.description = changes["description"].strip()
    if "image" in changes:
        c.image = changes["image"]

    db.add(c)
    db.commit()
    db.refresh(c)
    return {"success": True, "data": category_out(c), "message": "Category updated successfully"}


@router.delete("/categories/{category_id}")
def admin_categories_delete(category_id: str, db: Session = Depends(get_db)):
    c = get_category(db, category_id)
    in_use = db.query(Product).filter(Product.category_id == c.id).count()
    if in_use:
        raise Conflict(f"Cannot delete category with {in_use} product(s)")
    db.delete(c)
    db.commit()
    log.info("Deleted category %s", c.slug)
    return {"success": True, "message": "Category deleted successfully"}


# ────────────────────────────────────────────
# Promos
# ────────────────────────────────────────────

def _assign_promo_products(db: Session, promo: Promo, product_ids: list[str]) -> None:
    db.execute(
        update(Product)
        .where(Product.promo_id == promo.id)
        .values(promo_id=None)
        .execution_options(synchronize_session=False)
    )
    if product_ids:
        found = db.query(Product.id).filter(Product.id.in_(product_ids)).count()
        if found != len(set(product_ids)):
            raise NotFound("Product not found")
        db.execute(
            update(Product)
            .where(Product.id.in_(product_ids))
            .values(promo_id=promo.id)
            .execution_options(synchronize_session=False)
        )


def _unique_promo_slug(db: Session, title: str, exclude_id: str | None = None) -> str:
    slug = slugify(title)
    q = db.query(Promo).filter(Promo.slug == slug)
    if exclude_id:
        q = q.filter(Promo.id != exclude_id)
    if q.first():
        raise Conflict("Promo with this title already exists")
    return slug


@router.get("/promos")
def admin_promos_list(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    search: str | None = Query(default=None),
    status: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    now = datetime.now(timezone.utc)
    q = db.query(Promo)
    if search:
        like = f"%{search}%"
        q = q.filter(Promo.title.ilike(like) | Promo.description.ilike(like))
    q = filter_promos_by_status(q, status, now)
    q = q.order_by(Promo.created_at.desc())

    promos, pagination = paginate(q, page, limit)
    return {"success": True, "data": [promo_out(p, now) for p in promos], "pagination": pagination}


@router.get("/promos/{promo_id}")
def admin_promos_get(promo_id: str, db: Session = Depends(get_db)):
    p = get_promo(db, promo_id)
    data = promo_out(p)
    data["product_ids"] = [prod.id for prod in p.products]
    return {"success": True, "data": data}


@router.post("/promos", status_code=201)
def admin_promos_create(body: PromoIn, db: Session = Depends(get_db)):
    validate_promo(body.type, body.value, body.start_date, body.end_date)
    slug = _unique_promo_slug(db, body.title)

    p = Promo(
        title=body.title.strip(),
        slug=slug,
        description=body.description,
        type=body.type,
        value=body.value,
        start_date=body.start_date,
        end_date=body.end_date,
        is_active=body.is_active,
        min_purchase=body.min_purchase,
        max_discount=body.max_discount,
        usage_limit=body.usage_limit,
        image=body.image,
    )
    db.add(p)
    db.flush()
    _assign_promo_products(db, p, body.product_ids)
    db.commit()
    db.refresh(p)
    log.info("Created promo %s (%s %s)", p.slug, p.type, p.value)
    return {"success": True, "data": promo_out(p), "message": "Promo created successfully"}


@router.put("/promos/{promo_id}")
def admin_promos_update(promo_id: str, body: PromoUpdate, db: Session = Depends(get_db)):
    p = get_promo(db, promo_id)
    changes = body.model_dump(exclude_unset=True)
    product_ids = changes.pop("product_ids", None)

    validate_promo(
        changes.get("type") or p.type,
        changes["value"] if changes.get("value") is not None else p.value,
        changes.get("start_date") or p.start_date,
        changes.get("end_date") or p.end_date,
    )

    title = changes.pop("title", None)
    if title and title.strip() != p.title:
        p.slug = _unique_promo_slug(db, title, exclude_id=p.id)
        p.title = title.strip()

    for field, value in changes.items():
        if value is not None:
            setattr(p, field, value)

    db.add(p)
    if product_ids is not None:
        _assign_promo_products(db, p, product_ids)
    db.commit()
    db.refresh(p)
    return {"success": True, "data": promo_out(p), "message": "Promo updated successfully"}


@router.delete("/promos/{promo_id}")
def admin_promos_delete(promo_id: str, db: Session = Depends(get_db)):
    p = get_promo(db, promo_id)
    _assign_promo_products(db, p, [])
    db.delete(p)
    db.commit()
    log.info("Deleted promo %s", p.slug)
    return {"success": True, "message": "Promo deleted successfully"}


# ────────────────────────────────────────────
# Products
# ────────────────────────────────────────────

def _check_product_unique(db: Session, slug: str | None, sku: str | None, exclude_id: str | None = None) -> None:
    if slug:
        q = db.query(Product).filter(Product.slug == slug)
        if exclude_id:
            q = q.filter(Product.id != exclude_id)
        if q.first():
            raise Conflict("Product with this slug already exists")
    if sku:
        q = db.query(Product).filter(Product.sku == sku)
        if exclude_id:
            q = q.filter(Product.id != exclude_id)
        if q.first():
            raise Conflict("Product with this SKU already exists")


@router.get("/products")
def admin_products_list(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    search: str | None = Query(default=None),
    category_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    q = db.query(Product)
    if search:
        q = search_products(q, search)
    if category_id:
        q = q.filter(Product.category_id == category_id)
    q = q.order_by(Product.created_at.desc())

    now = datetime.now(timezone.utc)
    products, pagination = paginate(q, page, limit)
    return {"success": True, "data": [product_out(p, now) for p in products], "pagination": pagination}


@router.get("/products/{product_id}")
def admin_products_get(product_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": product_out(get_product(db, product_id))}


@router.post("/products", status_code=201)
def admin_products_create(body: ProductIn, db: Session = Depends(get_db)):
    validate_product_prices(body.price, body.price_after_discount)
    get_category(db, body.category_id)
    if body.promo_id:
        get_promo(db, body.promo_id)

    slug = slugify(body.slug or body.name)
    sku = body.sku.strip().upper()
    _check_product_unique(db, slug, sku)

    p = Product(
        name=body.name.strip(),
        slug=slug,
        sku=sku,
        description=body.description.strip(),
        price=body.price,
        price_after_discount=body.price_after_discount,
        images=body.images,
        category_id=body.category_id,
        tags=[t.strip().lower() for t in body.tags if t.strip()],
        stock=body.stock,
        is_published=body.is_published,
        promo_id=body.promo_id,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    log.info("Created product %s (%s)", p.slug, p.sku)
    return {"success": True, "data": product_out(p), "message": "Product created successfully"}


@router.put("/products/{product_id}")
def admin_products_update(product_id: str, body: ProductUpdate, db: Session = Depends(get_db)):
    p = get_product(db, product_id)
    changes = body.model_dump(exclude_unset=True)

    price = changes["price"] if changes.get("price") is not None else p.price
    if "price_after_discount" in changes:
        discounted = changes["price_after_discount"]
    else:
        discounted = p.price_after_discount
    validate_product_prices(price, discounted)

    if changes.get("category_id"):
        get_category(db, changes["category_id"])
    if changes.get("promo_id"):
        get_promo(db, changes["promo_id"])

    if changes.get("slug"):
        changes["slug"] = slugify(changes["slug"])
    if changes.get("sku"):
        changes["sku"] = changes["sku"].strip().upper()
    _check_product_unique(db, changes.get("slug"), changes.get("sku"), exclude_id=p.id)

    if changes.get("tags") is not None:
        changes["tags"] = [t.strip().lower() for t in changes["tags"] if t.strip()]

    nullable = {"price_after_discount", "promo_id"}
    for field, value in changes.items():
        if value is None and field not in nullable:
            continue
        setattr(p, field, value)

    db.add(p)
    db.commit()
    db.refresh(p)
    return {"success": True, "data": product_out(p), "message": "Product updated successfully"}


@router.delete("/products/{product_id}")
def admin_products_delete(product_id: str, db: Session = Depends(get_db)):
    p = get_product(db, product_id)
    db.delete(p)
    db.commit()
    log.info("Deleted product %s", p.slug)
    return {"success": True, "message": "Product deleted successfully"}
