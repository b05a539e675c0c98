import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id: Mapped[str | None] = mapped_column(ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    # Snapshot at the time of the click; the product may change or disappear later
    product_name: Mapped[str] = mapped_column(String(200))
    product_price: Mapped[int] = mapped_column(Integer)
    product_image: Mapped[str] = mapped_column(String, default="")
    category_name: Mapped[str] = mapped_column(String(100), default="")

    wa_prefill_message: Mapped[str] = mapped_column(Text)
    visitor_ip: Mapped[str] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(String, nullable=True)
    referrer: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
