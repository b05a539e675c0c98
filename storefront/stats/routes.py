import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, update
from sqlalchemy.orm import Session

from ..auth.session import require_admin
from ..catalog.models import Category, Product, Promo
from ..catalog.service import filter_promos_by_status
from ..db import get_db
from ..leads.models import Lead

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])

LOW_STOCK_BELOW = 5
TOP_N = 10


def _published(db: Session):
    return db.query(Product).filter(Product.is_published == True)  # noqa: E712


@router.get("/stats")
def admin_stats(
    period: int = Query(default=30, ge=1, le=365),
    db: Session = Depends(get_db),
):
    """Dashboard counters, top viewed and low stock products, leads per day."""
    now = datetime.now(timezone.utc)
    since = now - timedelta(days=period)

    published = _published(db).count()
    total_products = db.query(Product).count()
    overview = {
        "total_products": total_products,
        "published_products": published,
        "unpublished_products": total_products - published,
        "total_categories": db.query(Category).count(),
        "total_promos": db.query(Promo).count(),
        "active_promos": filter_promos_by_status(db.query(Promo), "active", now).count(),
        "total_leads": db.query(Lead).count(),
        "total_views": db.query(func.coalesce(func.sum(Product.views), 0)).scalar(),
    }

    most_viewed = _published(db).order_by(Product.views.desc()).limit(TOP_N).all()
    low_stock = (
        _published(db)
        .filter(Product.stock < LOW_STOCK_BELOW)
        .order_by(Product.stock.asc())
        .limit(TOP_N)
        .all()
    )

    day = func.date(Lead.created_at)
    leads_by_day = (
        db.query(day, func.count(Lead.id))
        .filter(Lead.created_at >= since)
        .group_by(day)
        .order_by(day)
        .all()
    )

    category_stats = (
        db.query(Category.name, func.count(Product.id), func.coalesce(func.sum(Product.views), 0))
        .join(Product, Product.category_id == Category.id)
        .filter(Product.is_published == True)  # noqa: E712
        .group_by(Category.id, Category.name)
        .order_by(func.count(Product.id).desc())
        .all()
    )

    return {
        "success": True,
        "data": {
            "overview": overview,
            "most_viewed_products": [
                {"id": p.id, "name": p.name, "slug": p.slug, "views": p.views} for p in most_viewed
            ],
            "low_stock_products": [
                {"id": p.id, "name": p.name, "slug": p.slug, "stock": p.stock} for p in low_stock
            ],
            "leads_by_day": [{"date": str(d), "count": n} for d, n in leads_by_day],
            "category_stats": [
                {"name": name, "count": count, "total_views": views} for name, count, views in category_stats
            ],
        },
    }


@router.post("/reset-views")
def admin_reset_views(db: Session = Depends(get_db)):
    result = db.execute(
        update(Product)
        .where(Product.views != 0)
        .values(views=0)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    log.info("Reset view counters on %d products", result.rowcount)
    return {
        "success": True,
        "message": f"Successfully reset view count for {result.rowcount} products",
        "data": {"modified_count": result.rowcount},
    }
