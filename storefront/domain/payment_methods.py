# storefront/domain/payment_methods.py
from decimal import Decimal
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, Field


class CardPayment(BaseModel):
    method: Literal["card"] = "card"
    stripe_session_id: str
    payment_intent_id: str
    amount: Optional[Decimal] = None
    currency: Optional[str] = None

    provider: ClassVar[Optional[str]] = "STRIPE"
    label: ClassVar[str] = "Stripe Card"

    @property
    def provider_order_id(self) -> str:
        return self.stripe_session_id

    @property
    def provider_reference(self) -> str:
        return self.payment_intent_id

    @property
    def provider_payment_id(self) -> Optional[str]:
        return self.payment_intent_id


class PayPalPayment(BaseModel):
    method: Literal["paypal"] = "paypal"
    paypal_order_id: str
    capture_id: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None

    provider: ClassVar[Optional[str]] = "PAYPAL"
    label: ClassVar[str] = "PayPal"

    @property
    def provider_order_id(self) -> str:
        return self.paypal_order_id

    @property
    def provider_reference(self) -> str:
        return self.capture_id or self.paypal_order_id

    @property
    def provider_payment_id(self) -> Optional[str]:
        return self.capture_id


class PayNowPayment(BaseModel):
    """payment_id bywa nieznane w chwili potwierdzenia, dopisuje je webhook."""

    method: Literal["paynow"] = "paynow"
    payment_request_id: str
    payment_id: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None

    provider: ClassVar[Optional[str]] = "HITPAY"
    label: ClassVar[str] = "PayNow"

    @property
    def provider_order_id(self) -> str:
        return self.payment_request_id

    @property
    def provider_reference(self) -> str:
        return self.payment_request_id

    @property
    def provider_payment_id(self) -> Optional[str]:
        return self.payment_id


class BankTransferPayment(BaseModel):
    method: Literal["bank_transfer"] = "bank_transfer"
    screenshot_path: Optional[str] = None

    provider: ClassVar[Optional[str]] = None
    label: ClassVar[str] = "Bank Transfer"


PaymentDetails = Annotated[
    Union[CardPayment, PayPalPayment, PayNowPayment, BankTransferPayment],
    Field(discriminator="method"),
]


class CaptureResult(BaseModel):
    status: str
    charge_id: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    raw: dict = Field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.status.upper() in ("COMPLETED", "PAID", "SUCCEEDED")


class ProviderOrder(BaseModel):
    id: str
    redirect_url: Optional[str] = None
    amount: Decimal
    currency: str


class RefundResult(BaseModel):
    refund_id: Optional[str] = None
    status: str
