# storefront/domain/errors.py


class StorefrontError(Exception):
    """Bazowy wyjatek domeny sklepu."""


class ValidationError(StorefrontError):
    pass


class NotFoundError(StorefrontError):
    pass


class InvalidStateError(StorefrontError):
    pass


class EmptyCartError(StorefrontError):
    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class InsufficientStockError(StorefrontError):
    def __init__(self, product_id: int, product_name: str):
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(f"Insufficient stock for {product_name}")


class PaymentProviderError(StorefrontError):
    def __init__(self, message: str, status_code: int | None = None, details=None):
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class SignatureVerificationError(StorefrontError):
    pass


class ReceiptGenerationError(StorefrontError):
    def __init__(self, order_id: int, message: str = "Receipt generation failed"):
        self.order_id = order_id
        super().__init__(message)


class AmountMismatchError(StorefrontError):
    def __init__(self, paid, expected):
        self.paid = paid
        self.expected = expected
        super().__init__(f"Paid amount {paid} does not match cart total {expected}")
