# storefront/services/payments/stripe_provider.py
from decimal import Decimal

import stripe

from storefront.domain.errors import PaymentProviderError
from storefront.domain.payment_methods import CaptureResult, ProviderOrder, RefundResult
from storefront.services.payments.base import PaymentProvider
from storefront.utils.settings import STRIPE_SECRET_KEY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

stripe.api_key = STRIPE_SECRET_KEY


def to_minor_units(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1")))


def from_minor_units(amount) -> Decimal | None:
    if amount is None:
        return None
    return (Decimal(int(amount)) / 100).quantize(Decimal("0.01"))


class StripeProvider(PaymentProvider):
    """Karta przez Stripe Checkout; refundowalny identyfikator to payment intent."""

    name = "STRIPE"

    def _assert_env(self):
        if not stripe.api_key:
            raise PaymentProviderError("Missing STRIPE_SECRET_KEY")

    def create_order(
        self,
        amount: Decimal,
        currency: str,
        line_items: list | None = None,
        success_url: str | None = None,
        cancel_url: str | None = None,
        metadata: dict | None = None,
        **options,
    ) -> ProviderOrder:
        self._assert_env()
        currency = currency.lower()

        if not line_items:
            line_items = [{"name": "Order", "price": amount, "quantity": 1}]

        try:
            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": {"name": item["name"]},
                            "unit_amount": to_minor_units(item["price"]),
                        },
                        "quantity": item["quantity"],
                    }
                    for item in line_items
                ],
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata or {},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session create failed: {e}")
            raise PaymentProviderError(f"Payment setup failed: {e.user_message or e}")

        logger.info(f"Stripe checkout session {session.id} created for {amount} {currency}")
        return ProviderOrder(id=session.id, redirect_url=session.url, amount=amount, currency=currency)

    def capture_order(self, external_order_id: str) -> CaptureResult:
        """Stripe Checkout przechwytuje sam, tu tylko weryfikacja sesji."""
        self._assert_env()
        try:
            session = stripe.checkout.Session.retrieve(external_order_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe session {external_order_id} retrieve failed: {e}")
            raise PaymentProviderError(f"Stripe verification failed: {e.user_message or e}")

        paid = session.payment_status == "paid"
        return CaptureResult(
            status="COMPLETED" if paid else str(session.payment_status).upper(),
            charge_id=session.payment_intent if paid else None,
            amount=from_minor_units(getattr(session, "amount_total", None)),
            currency=getattr(session, "currency", None),
        )

    def refund(self, payment_id: str, amount: Decimal | None = None, **options) -> RefundResult:
        self._assert_env()
        params = {"payment_intent": payment_id, "reason": "requested_by_customer"}
        if amount is not None:
            params["amount"] = to_minor_units(amount)

        try:
            refund = stripe.Refund.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Stripe refund for {payment_id} failed: {e}")
            raise PaymentProviderError(str(e.user_message or e))

        logger.info(f"Stripe refund {refund.id} for {payment_id}: {refund.status}")
        return RefundResult(refund_id=refund.id, status=refund.status)
