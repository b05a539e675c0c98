import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base

ROLE_SUPER_ADMIN = "super_admin"
ROLE_ADMIN = "admin"
ROLES = (ROLE_SUPER_ADMIN, ROLE_ADMIN)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String)
    email: Mapped[str | None] = mapped_column(String(254), unique=True, nullable=True)

    # Rows created before roles existed have no role; the legacy login backfills it
    role: Mapped[str | None] = mapped_column(String(20), nullable=True, default=ROLE_ADMIN)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Python-side defaults keep sub-second ordering for "earliest admin" lookups
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
