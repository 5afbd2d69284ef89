# storefront/domain/session.py
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class CartLine(BaseModel):
    """Snapshot pozycji koszyka, cena z chwili dodania."""

    product_id: int
    product_name: str
    price: Decimal
    quantity: int = Field(..., ge=1)
    image: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class SessionUser(BaseModel):
    id: int
    username: str
    email: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class SessionContext(BaseModel):
    """
    Jawny stan sesji przekazywany do handlerow.
    paypal_captured_order_id chroni przed ponownym przechwyceniem platnosci
    albo podwojnym potwierdzeniem zamowienia po odswiezeniu strony.
    """

    session_id: str
    user: Optional[SessionUser] = None
    cart: List[CartLine] = Field(default_factory=list)

    paypal_captured_order_id: Optional[str] = None
    paypal_capture_id: Optional[str] = None
    paypal_capture_amount: Optional[Decimal] = None
    paypal_capture_currency: Optional[str] = None

    @property
    def cart_total(self) -> Decimal:
        return sum((line.line_total for line in self.cart), Decimal("0.00"))

    def find_line(self, product_id: int) -> Optional[CartLine]:
        for line in self.cart:
            if line.product_id == product_id:
                return line
        return None
