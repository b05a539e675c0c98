import re

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..auth.session import require_admin
from ..db import get_db
from ..errors import ValidationFailed
from ..settings_service import get_app_config

router = APIRouter()

WHATSAPP_NUMBER_RE = re.compile(r"^62\d{8,13}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class AppConfigIn(BaseModel):
    whatsapp_number: str
    whatsapp_template: str | None = Field(default=None, max_length=500)
    store_name: str | None = Field(default=None, max_length=100)
    store_description: str | None = Field(default=None, max_length=500)
    store_address: str | None = Field(default=None, max_length=300)
    store_email: str | None = None


def _config_out(c) -> dict:
    return {
        "whatsapp_number": c.whatsapp_number,
        "whatsapp_template": c.whatsapp_template,
        "store_name": c.store_name,
        "store_description": c.store_description,
        "store_address": c.store_address,
        "store_email": c.store_email,
    }


@router.get("/api/store")
def store_public(db: Session = Depends(get_db)):
    c = get_app_config(db)
    return {
        "success": True,
        "data": {
            "store_name": c.store_name,
            "store_description": c.store_description,
            "whatsapp_number": c.whatsapp_number,
        },
    }


@router.get("/api/admin/config", dependencies=[Depends(require_admin)])
def config_get(db: Session = Depends(get_db)):
    return {"success": True, "data": _config_out(get_app_config(db))}


@router.put("/api/admin/config", dependencies=[Depends(require_admin)])
def config_update(body: AppConfigIn, db: Session = Depends(get_db)):
    number = body.whatsapp_number.strip()
    if not WHATSAPP_NUMBER_RE.match(number):
        raise ValidationFailed("Invalid WhatsApp number format. Use: 62xxxxxxxxx")
    if body.whatsapp_template is not None and not body.whatsapp_template.strip():
        raise ValidationFailed("WhatsApp template cannot be empty")

    email = body.store_email.strip().lower() if body.store_email else None
    if email and not EMAIL_RE.match(email):
        raise ValidationFailed("Please enter a valid email address")

    c = get_app_config(db)
    c.whatsapp_number = number
    if body.whatsapp_template is not None:
        c.whatsapp_template = body.whatsapp_template.strip()
    if body.store_name:
        c.store_name = body.store_name.strip()
    if body.store_description is not None:
        c.store_description = body.store_description.strip() or None
    if body.store_address is not None:
        c.store_address = body.store_address.strip() or None
    if body.store_email is not None:
        c.store_email = email

    db.add(c)
    db.commit()
    db.refresh(c)
    return {"success": True, "data": _config_out(c), "message": "Configuration updated successfully"}
