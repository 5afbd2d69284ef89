# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from storefront.domain.session import CartLine


class UserCreate(BaseModel):
    """Schema dla rejestracji uzytkownika."""

    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password should be at least 6 characters long")
    address: Optional[str] = Field(None, max_length=255)
    contact: Optional[str] = Field(None, max_length=50)


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    address: Optional[str] = None
    contact: Optional[str] = None
    role: str

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    id: int
    name: str
    quantity: int
    price: Decimal
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ItemIn(BaseModel):
    """Schema dla dodawania / zmiany ilosci produktu w koszyku."""

    quantity: Optional[int] = Field(None, description="Ilosc produktu")


class CartOut(BaseModel):
    items: List[CartLine]
    total: Decimal
    messages: List[str] = Field(default_factory=list)


class CheckoutOut(BaseModel):
    items: List[CartLine]
    total: Decimal
    currency: str
    paypal_client_id: Optional[str] = None


class OrderOut(BaseModel):
    id: int
    user_id: int
    items: List[CartLine]
    total: Decimal
    payment_method: str
    status: str
    order_date: datetime
    receipt_link: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ReceiptOut(BaseModel):
    order_id: int
    items: List[CartLine]
    total: Decimal
    payment_method: str
    receipt_download_path: str
    email_sent: Optional[str] = None
    email_error: Optional[str] = None


class EmailReceiptIn(BaseModel):
    email: str = ""


class PayPalCaptureIn(BaseModel):
    orderID: Optional[str] = None


class RefundRequestIn(BaseModel):
    order_id: int = Field(..., gt=0)
    reason: str = ""


class RefundRequestOut(BaseModel):
    id: int
    order_id: int
    user_id: int
    reason: str
    status: str
    admin_note: Optional[str] = None
    created_at: datetime
    decided_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RejectRefundIn(BaseModel):
    admin_note: Optional[str] = None


class MessageOut(BaseModel):
    messages: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
