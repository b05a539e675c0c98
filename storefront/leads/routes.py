import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field
from sqlalchemy import update
from sqlalchemy.orm import Session

from ..auth.session import require_admin
from ..catalog.models import Product
from ..catalog.pricing import effective_price
from ..db import get_db
from ..errors import NotFound, ValidationFailed
from ..pagination import paginate
from ..settings import settings
from ..settings_service import get_app_config
from .models import Lead
from .whatsapp import build_cart_message, render_product_message, whatsapp_url

log = logging.getLogger(__name__)

router = APIRouter()


class ViewIn(BaseModel):
    create_lead: bool = False


class CartItemIn(BaseModel):
    slug: str
    quantity: int = Field(default=1, ge=1)


class CartIn(BaseModel):
    items: list[CartItemIn]


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def _product_url(slug: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/products/{slug}"


@router.post("/api/products/{slug}/view")
def product_view(slug: str, request: Request, body: ViewIn | None = None, db: Session = Depends(get_db)):
    result = db.execute(
        update(Product)
        .where(Product.slug == slug, Product.is_published == True)  # noqa: E712
        .values(views=Product.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFound("Product not found")
    db.commit()

    product = db.query(Product).filter(Product.slug == slug).first()
    data = {"views": product.views}

    if body and body.create_lead:
        config = get_app_config(db)
        price = effective_price(product, product.promo, datetime.now(timezone.utc))
        message = render_product_message(config.whatsapp_template, product.name, price, _product_url(product.slug))

        lead = Lead(
            product_id=product.id,
            product_name=product.name,
            product_price=price,
            product_image=(product.images or [""])[0],
            category_name=product.category.name if product.category else "",
            wa_prefill_message=message,
            visitor_ip=_client_ip(request),
            user_agent=request.headers.get("user-agent"),
            referrer=request.headers.get("referer"),
        )
        db.add(lead)
        db.commit()
        log.info("Lead created for product %s at %s", product.slug, price)

        data["whatsapp_url"] = whatsapp_url(config.whatsapp_number, message)
        data["message"] = message

    return {"success": True, "data": data}


@router.post("/api/leads/cart")
def cart_checkout(body: CartIn, db: Session = Depends(get_db)):
    if not body.items:
        raise ValidationFailed("Cart is empty")

    now = datetime.now(timezone.utc)
    lines = []
    for item in body.items:
        p = (
            db.query(Product)
            .filter(Product.slug == item.slug, Product.is_published == True)  # noqa: E712
            .first()
        )
        if not p:
            raise NotFound(f"Product not found: {item.slug}")
        lines.append((p.name, effective_price(p, p.promo, now), item.quantity))

    config = get_app_config(db)
    message = build_cart_message(lines)
    total = sum(price * qty for _, price, qty in lines)
    return {
        "success": True,
        "data": {"message": message, "total": total, "whatsapp_url": whatsapp_url(config.whatsapp_number, message)},
    }


@router.get("/api/admin/leads", dependencies=[Depends(require_admin)])
def leads_list(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    q = db.query(Lead).order_by(Lead.created_at.desc())
    leads, pagination = paginate(q, page, limit)
    data = [
        {
            "id": lead.id,
            "product_id": lead.product_id,
            "product_name": lead.product_name,
            "product_price": lead.product_price,
            "product_image": lead.product_image,
            "category_name": lead.category_name,
            "wa_prefill_message": lead.wa_prefill_message,
            "visitor_ip": lead.visitor_ip,
            "user_agent": lead.user_agent,
            "referrer": lead.referrer,
            "created_at": lead.created_at.isoformat() if lead.created_at else None,
        }
        for lead in leads
    ]
    return {"success": True, "data": data, "pagination": pagination}
