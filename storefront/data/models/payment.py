from sqlalchemy import Column, Integer, ForeignKey, String, Numeric, UniqueConstraint

from storefront.data.database import Base


class PaymentModel(Base):
    """
    Dane platnosci u dostawcy, 1:1 z zamowieniem.

    provider_reference to identyfikator tymczasowy znany przy potwierdzeniu
    (np. id payment request w HitPay). provider_payment_id to kanoniczny,
    zwracalny identyfikator (payment intent, capture id, charge id) i jest
    ustawiany dopiero gdy jest znany.
    """

    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("provider", "provider_order_id", name="uq_payments_provider_order"),
    )

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)

    provider = Column(String(20), nullable=False)  # STRIPE, PAYPAL, HITPAY
    provider_order_id = Column(String(255), nullable=True, index=True)
    provider_reference = Column(String(255), nullable=True)
    provider_payment_id = Column(String(255), nullable=True)

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(10), nullable=False)
    payment_status = Column(String(30), nullable=False)

    @property
    def refundable_id(self) -> str | None:
        return self.provider_payment_id

    @property
    def is_resolved(self) -> bool:
        return self.provider_payment_id is not None

    def resolve(self, payment_id: str):
        self.provider_payment_id = payment_id
