# storefront/services/payments/hitpay_provider.py
import hashlib
import hmac
import json
from decimal import Decimal

from storefront.domain.errors import PaymentProviderError, SignatureVerificationError
from storefront.domain.payment_methods import CaptureResult, ProviderOrder, RefundResult
from storefront.services.payments.base import HttpPaymentProvider, format_amount, parse_amount
from storefront.utils.retry import status_poll
from storefront.utils.settings import (
    HITPAY_API,
    HITPAY_API_KEY,
    HITPAY_POLL_ATTEMPTS,
    HITPAY_POLL_DELAY_SECONDS,
    HITPAY_SALT,
    PROVIDER_TIMEOUT_SECONDS,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SIGNATURE_HEADER = "Hitpay-Signature"
EVENT_OBJECT_HEADER = "Hitpay-Event-Object"
EVENT_TYPE_HEADER = "Hitpay-Event-Type"


def compute_signature(raw_body: bytes, salt: str) -> str:
    return hmac.new(salt.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def succeeded_payment_id(payment_request: dict) -> str | None:
    """Pierwsza udana platnosc z payment request - to jest prawdziwy charge id."""
    for payment in payment_request.get("payments") or []:
        if str(payment.get("status", "")).lower() in ("succeeded", "completed") and payment.get("id"):
            return payment["id"]
    return None


def request_status(payment_request: dict) -> str:
    return str(payment_request.get("status", "")).lower()


class HitPayProvider(HttpPaymentProvider):
    """
    PayNow przez HitPay payment requests.

    - create_order zaklada payment request i zwraca url do zaplaty
    - capture_order odpytuje status (ograniczona liczba prob, staly odstep)
    - refund wymaga kwoty i charge id (nie id payment requestu)
    - webhook podpisany HMAC-SHA256 surowego body z solą
    """

    name = "HITPAY"

    def __init__(
        self,
        api_key: str | None = None,
        salt: str | None = None,
        base_url: str | None = None,
        timeout: int = PROVIDER_TIMEOUT_SECONDS,
        poll_attempts: int = HITPAY_POLL_ATTEMPTS,
        poll_delay: float = HITPAY_POLL_DELAY_SECONDS,
    ):
        super().__init__(base_url or HITPAY_API, timeout)
        self.api_key = api_key if api_key is not None else HITPAY_API_KEY
        self.salt = salt if salt is not None else HITPAY_SALT
        self.poll_attempts = max(1, poll_attempts)
        self.poll_delay = poll_delay

    def _headers(self) -> dict:
        if not self.api_key:
            raise PaymentProviderError("Missing HITPAY_API_KEY")
        return {
            "X-BUSINESS-API-KEY": self.api_key,
            "X-Requested-With": "XMLHttpRequest",
        }

    def create_order(
        self,
        amount: Decimal,
        currency: str,
        reference_number: str | None = None,
        redirect_url: str | None = None,
        webhook_url: str | None = None,
        email: str | None = None,
        **options,
    ) -> ProviderOrder:
        amount = Decimal(str(amount))
        if amount <= 0:
            raise PaymentProviderError(f"Invalid amount: {amount}")

        form = {
            "amount": format_amount(amount),
            "currency": currency,
            "payment_methods[]": "paynow_online",
        }
        if reference_number:
            form["reference_number"] = reference_number
        if redirect_url:
            form["redirect_url"] = redirect_url
        if webhook_url:
            form["webhook"] = webhook_url
        if email:
            form["email"] = email

        data = self._request("POST", "/v1/payment-requests", "create payment", headers=self._headers(), data=form)
        if not data.get("id"):
            raise PaymentProviderError("HitPay create payment response invalid (missing id)")

        logger.info(f"HitPay payment request {data['id']} created for {form['amount']} {currency}")
        return ProviderOrder(id=data["id"], redirect_url=data.get("url"), amount=amount, currency=currency)

    def get_payment_request(self, request_id: str) -> dict:
        return self._request(
            "GET",
            f"/v1/payment-requests/{request_id}",
            "payment status",
            headers=self._headers(),
        )

    def capture_order(self, external_order_id: str) -> CaptureResult:
        poll = status_poll(
            attempts=self.poll_attempts,
            delay=self.poll_delay,
            is_pending=lambda data: request_status(data) == "pending",
        )
        data = poll(self.get_payment_request)(external_order_id)
        status = request_status(data)
        logger.info(f"HitPay payment request {external_order_id} status after polling: {status}")
        return CaptureResult(
            status=status.upper(),
            charge_id=succeeded_payment_id(data),
            amount=parse_amount(data.get("amount")),
            currency=data.get("currency"),
            raw=data,
        )

    def resolve_charge_id(self, request_id: str) -> str | None:
        return succeeded_payment_id(self.get_payment_request(request_id))

    def refund(self, payment_id: str, amount: Decimal | None = None, **options) -> RefundResult:
        if amount is None:
            raise PaymentProviderError("HitPay refund requires an amount")

        data = self._request(
            "POST",
            "/v1/refund",
            "refund",
            headers=self._headers(),
            data={"payment_id": payment_id, "amount": format_amount(amount)},
        )
        logger.info(f"HitPay refund {data.get('id')} for payment {payment_id}: {data.get('status')}")
        return RefundResult(refund_id=data.get("id"), status=str(data.get("status") or "succeeded"))

    def verify_signature(self, raw_body: bytes, signature: str | None) -> bool:
        if not self.salt:
            raise PaymentProviderError("Missing HITPAY_SALT")
        if not signature:
            return False
        expected = compute_signature(raw_body, self.salt)
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))

    def parse_webhook(self, raw_body: bytes, signature: str | None, event_object: str | None = None) -> dict:
        """
        Weryfikuje podpis i wyciaga (payment_request_id, payment_id, status).
        Brakujace pola zostaja None - wywolujacy decyduje co z tym zrobic.
        """
        if not self.verify_signature(raw_body, signature):
            raise SignatureVerificationError("Invalid signature")

        try:
            payload = json.loads(raw_body or b"{}")
        except ValueError:
            raise SignatureVerificationError("Invalid payload")
        if not isinstance(payload, dict):
            raise SignatureVerificationError("Invalid payload")

        event_object = (event_object or "").lower()
        if event_object == "payment_request" or "payments" in payload:
            return {
                "payment_request_id": payload.get("id"),
                "payment_id": succeeded_payment_id(payload),
                "status": request_status(payload),
            }

        return {
            "payment_request_id": payload.get("payment_request_id"),
            "payment_id": payload.get("payment_id") or payload.get("id"),
            "status": str(payload.get("status", "")).lower(),
        }
