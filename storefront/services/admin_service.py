# storefront/services/admin_service.py
from sqlalchemy.orm import Session

from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo


class AdminService:
    """Widoki tylko do odczytu dla panelu admina."""

    def __init__(self, db: Session):
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.users = UserRepo(db)

    def list_orders(self) -> list[dict]:
        usernames: dict[int, tuple[str, str]] = {}
        rows = []
        for order in self.orders.list_orders():
            if order.user_id not in usernames:
                user = self.users.get_user(order.user_id)
                usernames[order.user_id] = (user.username, user.email) if user else (None, None)
            username, email = usernames[order.user_id]
            rows.append(
                {
                    "id": order.id,
                    "user_id": order.user_id,
                    "username": username,
                    "email": email,
                    "items": order.items,
                    "total": order.total,
                    "payment_method": order.payment_method,
                    "status": order.status,
                    "order_date": order.order_date,
                    "bank_screenshot": order.bank_screenshot,
                }
            )
        return rows

    def dashboard(self) -> dict:
        return {
            "products": self.products.list_products(),
            "orders": self.list_orders(),
        }
