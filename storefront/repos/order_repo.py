# storefront/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        """Dodaje i flushuje (potrzebne id), commit robi wywolujacy."""
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_user_orders(self, user_id: int, status: str | None = None) -> list[OrderModel]:
        query = select(OrderModel).where(OrderModel.user_id == user_id)
        if status:
            query = query.where(OrderModel.status == status)
        query = query.order_by(OrderModel.order_date.desc(), OrderModel.id.desc())
        return list(self.db.execute(query).scalars())

    def list_orders(self) -> list[OrderModel]:
        query = select(OrderModel).order_by(OrderModel.order_date.desc(), OrderModel.id.desc())
        return list(self.db.execute(query).scalars())

    def update_order_status(self, order_id: int, status: str) -> OrderModel | None:
        order = self.get_order(order_id)
        if order:
            order.status = status
        return order
