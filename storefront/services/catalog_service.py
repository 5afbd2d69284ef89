# storefront/services/catalog_service.py
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _parse_quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Quantity must be a whole number")
    if quantity < 0:
        raise ValidationError("Quantity cannot be negative")
    return quantity


def _parse_price(value) -> Decimal:
    try:
        price = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise ValidationError("Price must be a number")
    if price < 0:
        raise ValidationError("Price cannot be negative")
    return price


class CatalogService:
    """CRUD produktow dla panelu admina i listy sklepu."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(self) -> list[ProductModel]:
        return self.repo.list_products()

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def add_product(self, name: str, quantity, price, image: str | None = None) -> ProductModel:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Product name is required")

        product = ProductModel(
            name=name,
            quantity=_parse_quantity(quantity),
            price=_parse_price(price),
            image=image,
        )
        created = self.repo.create_product(product)
        logger.info(f"Product {created.id} created: {created.name} qty={created.quantity} price={created.price}")
        return created

    def update_product(
        self,
        product_id: int,
        name: str,
        quantity,
        price,
        image: str | None = None,
    ) -> ProductModel:
        product = self.get_product(product_id)

        name = (name or "").strip()
        if not name:
            raise ValidationError("Product name is required")

        product.name = name
        product.quantity = _parse_quantity(quantity)
        product.price = _parse_price(price)
        if image:
            product.image = image

        updated = self.repo.save(product)
        logger.info(f"Product {product_id} updated")
        return updated

    def delete_product(self, product_id: int):
        product = self.get_product(product_id)
        self.repo.delete_product(product)
        logger.info(f"Product {product_id} deleted")
