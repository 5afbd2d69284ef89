# storefront/repos/cart_repo.py
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_items(self, user_id: int) -> list[dict]:
        cart = self.db.get(CartModel, user_id)
        if not cart or not isinstance(cart.items, list):
            return []
        return cart.items

    def save_items(self, user_id: int, items: list[dict]):
        # nadpisanie calego koszyka, nie przyrostowo
        cart = self.db.get(CartModel, user_id)
        if cart:
            cart.items = items
        else:
            self.db.add(CartModel(user_id=user_id, items=items))
        self.db.commit()

    def delete(self, user_id: int):
        cart = self.db.get(CartModel, user_id)
        if cart:
            self.db.delete(cart)
            self.db.commit()
