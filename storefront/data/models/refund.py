from sqlalchemy import Column, Integer, ForeignKey, String, Numeric, DateTime
from datetime import datetime, timezone

from storefront.data.database import Base


class RefundModel(Base):
    __tablename__ = "refunds"

    id = Column(Integer, primary_key=True)
    refund_request_id = Column(Integer, ForeignKey("refund_requests.id"), nullable=False)

    provider = Column(String(20), nullable=False)
    provider_refund_id = Column(String(255), nullable=True)
    amount = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(10), nullable=True)
    status = Column(String(30), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
