# storefront/services/payments/paypal_provider.py
from decimal import Decimal

import requests

from storefront.domain.errors import PaymentProviderError
from storefront.domain.payment_methods import CaptureResult, ProviderOrder, RefundResult
from storefront.services.payments.base import HttpPaymentProvider, format_amount, parse_amount, read_json
from storefront.utils.settings import (
    PAYPAL_API,
    PAYPAL_CLIENT_ID,
    PAYPAL_CLIENT_SECRET,
    PROVIDER_TIMEOUT_SECONDS,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def first_capture(capture: dict) -> dict:
    """purchase_units[0].payments.captures[0] - tu siedzi id do zwrotu i przechwycona kwota."""
    for unit in capture.get("purchase_units") or []:
        for item in (unit.get("payments") or {}).get("captures") or []:
            if item.get("id"):
                return item
    return {}


class PayPalProvider(HttpPaymentProvider):
    name = "PAYPAL"

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        base_url: str | None = None,
        timeout: int = PROVIDER_TIMEOUT_SECONDS,
    ):
        super().__init__(base_url or PAYPAL_API, timeout)
        self.client_id = client_id if client_id is not None else PAYPAL_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else PAYPAL_CLIENT_SECRET

    def _assert_env(self):
        if not self.client_id:
            raise PaymentProviderError("Missing PAYPAL_CLIENT_ID")
        if not self.client_secret:
            raise PaymentProviderError("Missing PAYPAL_CLIENT_SECRET")
        if not self.base_url:
            raise PaymentProviderError("Missing PAYPAL_API")

    def _access_token(self) -> str:
        self._assert_env()
        try:
            resp = requests.post(
                f"{self.base_url}/v1/oauth2/token",
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise PaymentProviderError(f"PayPal token request failed: {e}")

        data = read_json(resp)
        if not resp.ok:
            logger.error(f"PayPal getAccessToken failed: {resp.status_code} {data}")
            raise PaymentProviderError(f"PayPal token error ({resp.status_code})", status_code=resp.status_code)
        if not data.get("access_token"):
            logger.error(f"PayPal token response invalid: {data}")
            raise PaymentProviderError("PayPal token response invalid")
        return data["access_token"]

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._access_token()}",
        }

    def create_order(self, amount: Decimal, currency: str, **options) -> ProviderOrder:
        amount = Decimal(str(amount))
        if amount <= 0:
            raise PaymentProviderError(f"Invalid amount: {amount}")

        data = self._request(
            "POST",
            "/v2/checkout/orders",
            "create order",
            headers=self._headers(),
            json={
                "intent": "CAPTURE",
                "purchase_units": [
                    {"amount": {"currency_code": currency, "value": format_amount(amount)}}
                ],
            },
        )
        if not data.get("id"):
            raise PaymentProviderError("PayPal createOrder response invalid (missing id)")

        logger.info(f"PayPal order {data['id']} created for {format_amount(amount)} {currency}")
        return ProviderOrder(id=data["id"], amount=amount, currency=currency)

    def capture_order(self, external_order_id: str) -> CaptureResult:
        if not external_order_id:
            raise PaymentProviderError("Missing orderId")

        data = self._request(
            "POST",
            f"/v2/checkout/orders/{external_order_id}/capture",
            "capture order",
            headers=self._headers(),
        )
        status = str(data.get("status", "")).upper()
        logger.info(f"PayPal order {external_order_id} capture status {status}")
        captured = first_capture(data)
        amount = captured.get("amount") or {}
        return CaptureResult(
            status=status,
            charge_id=captured.get("id"),
            amount=parse_amount(amount.get("value")),
            currency=amount.get("currency_code"),
            raw=data,
        )

    def refund(
        self,
        payment_id: str,
        amount: Decimal | None = None,
        currency: str = "SGD",
        note: str | None = None,
        **options,
    ) -> RefundResult:
        """Zwrot przechwyconej platnosci, amount=None oznacza pelny zwrot."""
        body: dict = {}
        if amount is not None:
            body["amount"] = {"value": format_amount(amount), "currency_code": currency}
        if note:
            body["note_to_payer"] = note[:255]

        data = self._request(
            "POST",
            f"/v2/payments/captures/{payment_id}/refund",
            "refund",
            headers=self._headers(),
            json=body,
        )
        logger.info(f"PayPal refund {data.get('id')} for capture {payment_id}: {data.get('status')}")
        return RefundResult(refund_id=data.get("id"), status=str(data.get("status") or "COMPLETED"))
