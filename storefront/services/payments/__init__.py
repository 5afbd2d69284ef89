from storefront.services.payments.base import PaymentProvider
from storefront.services.payments.stripe_provider import StripeProvider
from storefront.services.payments.paypal_provider import PayPalProvider
from storefront.services.payments.hitpay_provider import HitPayProvider
from storefront.domain.errors import PaymentProviderError


class PaymentGateways:
    """Rejestr dostawcow wg nazwy zapisanej w payments.provider."""

    def __init__(
        self,
        stripe: StripeProvider | None = None,
        paypal: PayPalProvider | None = None,
        hitpay: HitPayProvider | None = None,
    ):
        self.stripe = stripe or StripeProvider()
        self.paypal = paypal or PayPalProvider()
        self.hitpay = hitpay or HitPayProvider()

    def get(self, provider: str) -> PaymentProvider:
        providers = {
            "STRIPE": self.stripe,
            "PAYPAL": self.paypal,
            "HITPAY": self.hitpay,
        }
        try:
            return providers[(provider or "").upper()]
        except KeyError:
            raise PaymentProviderError(f"Unsupported provider: {provider}")


__all__ = [
    "PaymentProvider",
    "StripeProvider",
    "PayPalProvider",
    "HitPayProvider",
    "PaymentGateways",
]
