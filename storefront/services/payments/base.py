# storefront/services/payments/base.py
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation

import requests

from storefront.domain.errors import PaymentProviderError
from storefront.domain.payment_methods import CaptureResult, ProviderOrder, RefundResult
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def format_amount(amount) -> str:
    return f"{Decimal(str(amount)).quantize(Decimal('0.01'))}"


def parse_amount(value) -> Decimal | None:
    """Kwota z odpowiedzi dostawcy, None gdy brak albo nieczytelna."""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


def read_json(resp: requests.Response) -> dict:
    try:
        data = resp.json()
    except ValueError:
        return {"raw": resp.text}
    return data if isinstance(data, dict) else {"data": data}


class PaymentProvider(ABC):
    """
    Wspolny kontrakt dostawcy platnosci:
    create_order -> capture_order -> refund
    """

    name: str = ""

    @abstractmethod
    def create_order(self, amount: Decimal, currency: str, **options) -> ProviderOrder:
        ...

    @abstractmethod
    def capture_order(self, external_order_id: str) -> CaptureResult:
        ...

    @abstractmethod
    def refund(self, payment_id: str, amount: Decimal | None = None, **options) -> RefundResult:
        ...


class HttpPaymentProvider(PaymentProvider):
    """Dostawca rozmawiajacy z API po HTTP (requests)."""

    def __init__(self, base_url: str, timeout: int):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str, action: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        logger.info(f"{self.name} {method} {url}")
        try:
            resp = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{self.name} {action} request failed: {e}")
            raise PaymentProviderError(f"{self.name} {action} request failed: {e}")

        data = read_json(resp)
        if not resp.ok:
            logger.error(f"{self.name} {action} failed: {resp.status_code} {data}")
            raise PaymentProviderError(
                f"{self.name} {action} error ({resp.status_code})",
                status_code=resp.status_code,
                details=data,
            )
        if "raw" in data:
            logger.error(f"{self.name} {action} returned non-JSON: {data['raw'][:200]}")
            raise PaymentProviderError(f"{self.name} {action} returned non-JSON")
        return data
