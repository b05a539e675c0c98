from datetime import datetime

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base

SINGLETON_ID = "global"


class LegacyAdminSecret(Base):
    """Password-only admin login secret. Exactly one row, id 'global'."""

    __tablename__ = "legacy_admin_secret"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=SINGLETON_ID)
    secret_hash: Mapped[str] = mapped_column(String)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())


class AppConfig(Base):
    __tablename__ = "app_config"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=SINGLETON_ID)

    whatsapp_number: Mapped[str] = mapped_column(String(20))
    whatsapp_template: Mapped[str] = mapped_column(String(500))

    store_name: Mapped[str] = mapped_column(String(100), default="SistaBag")
    store_description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    store_address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    store_email: Mapped[str | None] = mapped_column(String(254), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())
