#storefront/data/models/cart.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, ForeignKey, JSON, DateTime

from storefront.data.database import Base


class CartModel(Base):
    """Utrwalona kopia koszyka z sesji, jeden wiersz na uzytkownika."""

    __tablename__ = "carts"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    items = Column(JSON, nullable=False, default=list)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
