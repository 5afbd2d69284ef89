from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, JSON
from datetime import datetime, timezone

from storefront.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # snapshot koszyka w chwili zakupu, nie zmienia sie po utworzeniu
    items = Column(JSON, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(50), nullable=False)
    bank_screenshot = Column(String(255), nullable=True)

    status = Column(String(20), nullable=False, default="pending")  # pending, paid, refunded
    order_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
