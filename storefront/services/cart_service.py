from decimal import Decimal
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.domain.errors import NotFoundError
from storefront.domain.session import CartLine, SessionContext
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _to_int(value, default: int | None) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class CartService:
    """
    Koszyk trzymany w sesji i lustrzany wiersz w bazie (per user).
    commands (add, update, remove, clear) modyfikuja stan i zapisuja caly koszyk
    query (list) tylko odczyt

    Brak koordynacji rownoleglych requestow tego samego usera, wygrywa ostatni zapis.
    """

    def __init__(self, db: Session, store: SessionStore):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.store = store

    #query - odczyt
    def list(self, ctx: SessionContext) -> List[CartLine]:
        return list(ctx.cart)

    @staticmethod
    def total(ctx: SessionContext) -> Decimal:
        return ctx.cart_total

    #commands
    def add(self, ctx: SessionContext, product_id: int, quantity=None) -> List[str]:
        messages: List[str] = []

        quantity_to_add = _to_int(quantity, 1) or 1
        if quantity_to_add < 1:
            quantity_to_add = 1

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        existing = ctx.find_line(product_id)
        in_cart = existing.quantity if existing else 0
        wanted = in_cart + quantity_to_add

        # przycinamy do stanu magazynu zamiast odrzucac
        if wanted > product.quantity:
            messages.append(
                f"Not enough stock. Available: {product.quantity}, in cart: {in_cart}."
            )
            wanted = product.quantity

        if wanted < 1:
            logger.info(f"Product {product_id} out of stock, nothing added for user {self._user_id(ctx)}")
            return messages

        if existing:
            existing.quantity = wanted
        else:
            ctx.cart.append(
                CartLine(
                    product_id=product.id,
                    product_name=product.name,
                    price=Decimal(product.price),
                    quantity=wanted,
                    image=product.image,
                )
            )

        logger.info(f"Cart of user {self._user_id(ctx)}: product {product_id} -> qty {wanted}")
        self._persist(ctx)
        return messages

    def update(self, ctx: SessionContext, product_id: int, quantity=None) -> List[str]:
        if not ctx.cart:
            return ["Cart is empty."]

        line = ctx.find_line(product_id)
        if not line:
            return ["Item not found in cart."]

        wanted = _to_int(quantity, line.quantity)
        if wanted < 1:
            wanted = 1

        product = self.products.get_product(product_id)
        if not product:
            return ["Product not found / DB error."]

        messages: List[str] = []
        if wanted > product.quantity:
            wanted = product.quantity
            messages.append(f"Not enough stock. Max available: {product.quantity}.")

        if wanted < 1:
            ctx.cart = [i for i in ctx.cart if i.product_id != product_id]
            messages.append(f"{line.product_name} is out of stock and was removed from your cart.")
        else:
            line.quantity = wanted

        logger.info(f"Cart of user {self._user_id(ctx)}: product {product_id} updated to qty {wanted}")
        self._persist(ctx)
        return messages

    def remove(self, ctx: SessionContext, product_id: int) -> List[str]:
        if not ctx.cart:
            return ["Cart is empty."]

        before = len(ctx.cart)
        ctx.cart = [i for i in ctx.cart if i.product_id != product_id]
        if len(ctx.cart) == before:
            return ["Item not found in cart."]

        logger.info(f"Cart of user {self._user_id(ctx)}: product {product_id} removed")
        self._persist(ctx)
        return []

    def clear(self, ctx: SessionContext):
        ctx.cart = []
        self.store.save(ctx)

        if ctx.user:
            try:
                self.repo.delete(ctx.user.id)
            except SQLAlchemyError as e:
                self.repo.db.rollback()
                logger.error(f"Cart DB clear error for user {ctx.user.id}: {e}")
        logger.info(f"Cart of user {self._user_id(ctx)} cleared")

    def load_from_store(self, ctx: SessionContext, user_id: int) -> List[CartLine]:
        """Wczytanie utrwalonego koszyka do sesji (po zalogowaniu)."""
        items = []
        for raw in self.repo.get_items(user_id):
            try:
                items.append(CartLine.model_validate(raw))
            except ValueError as e:
                logger.warning(f"Skipping malformed cart line for user {user_id}: {e}")
        ctx.cart = items
        self.store.save(ctx)
        logger.info(f"Loaded {len(items)} cart lines for user {user_id}")
        return items

    def _persist(self, ctx: SessionContext):
        self.store.save(ctx)
        if not ctx.user:
            return
        try:
            self.repo.save_items(ctx.user.id, [line.model_dump(mode="json") for line in ctx.cart])
        except SQLAlchemyError as e:
            # sesja pozostaje zrodlem prawdy dla biezacego requestu
            self.repo.db.rollback()
            logger.error(f"Cart DB save error for user {ctx.user.id}: {e}")

    @staticmethod
    def _user_id(ctx: SessionContext):
        return ctx.user.id if ctx.user else None
