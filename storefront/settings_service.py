from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .auth.passwords import hash_password
from .settings import settings
from .settings_db import AppConfig, LegacyAdminSecret, SINGLETON_ID

DEFAULT_WHATSAPP_TEMPLATE = (
    "Halo, saya tertarik dengan produk:\n\n"
    "*{productName}*\n"
    "Harga: {productPrice}\n"
    "Link: {productUrl}\n\n"
    "Bisakah saya mendapatkan informasi lebih lanjut?"
)


def get_app_config(db: Session) -> AppConfig:
    c = db.query(AppConfig).filter(AppConfig.id == SINGLETON_ID).first()
    if c:
        return c

    db.add(AppConfig(
        id=SINGLETON_ID,
        whatsapp_number=settings.default_whatsapp_number,
        whatsapp_template=DEFAULT_WHATSAPP_TEMPLATE,
        store_name="SistaBag",
    ))
    try:
        db.commit()
    except IntegrityError:
        # a concurrent first read inserted the row already
        db.rollback()
    return db.query(AppConfig).filter(AppConfig.id == SINGLETON_ID).one()


def get_legacy_secret(db: Session) -> LegacyAdminSecret | None:
    return db.query(LegacyAdminSecret).filter(LegacyAdminSecret.id == SINGLETON_ID).first()


def set_legacy_secret(db: Session, secret: str) -> LegacyAdminSecret:
    s = get_legacy_secret(db)
    if not s:
        s = LegacyAdminSecret(id=SINGLETON_ID, secret_hash=hash_password(secret))
    else:
        s.secret_hash = hash_password(secret)
    db.add(s)
    db.commit()
    db.refresh(s)
    return s
