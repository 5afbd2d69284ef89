#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.product import ProductModel
from storefront.data.models.cart import CartModel
from storefront.data.models.order import OrderModel
from storefront.data.models.payment import PaymentModel
from storefront.data.models.refund_request import RefundRequestModel
from storefront.data.models.refund import RefundModel

__all__ = [
    "UserModel",
    "ProductModel",
    "CartModel",
    "OrderModel",
    "PaymentModel",
    "RefundRequestModel",
    "RefundModel",
]
