# storefront/services/checkout_service.py
import uuid
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.payment import PaymentModel
from storefront.domain.errors import (
    AmountMismatchError,
    EmptyCartError,
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    PaymentProviderError,
    ReceiptGenerationError,
    ValidationError,
)
from storefront.domain.payment_methods import (
    BankTransferPayment,
    CardPayment,
    PaymentDetails,
    PayNowPayment,
    PayPalPayment,
    ProviderOrder,
)
from storefront.domain.session import CartLine, SessionContext
from storefront.repos.order_repo import OrderRepo
from storefront.repos.payment_repo import PaymentRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.cart_service import CartService
from storefront.services.mail_service import send_receipt_email
from storefront.services.payments import PaymentGateways
from storefront.services.receipt_service import ReceiptData, ReceiptService
from storefront.services.session_store import SessionStore
from storefront.utils.settings import CURRENCY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# statusy z przekierowania HitPay po ktorych nie ma sensu odpytywac
HITPAY_ABORTED = ("canceled", "cancelled", "failed", "expired")


@dataclass
class ConfirmedOrder:
    order: OrderModel
    items: List[CartLine]
    receipt_path: Path
    already_confirmed: bool = False


class CheckoutService:
    """
    Use case'y checkoutu. Kazda sciezka platnosci (karta, PayPal, PayNow, przelew)
    konczy sie w confirm_order:

    koszyk -> zamowienie -> zmniejszenie stanow -> platnosc -> (commit) -> czyszczenie koszyka -> paragon
    """

    def __init__(
        self,
        db: Session,
        store: SessionStore,
        gateways: PaymentGateways,
        receipts: ReceiptService | None = None,
        currency: str = CURRENCY,
    ):
        self.db = db
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.payments = PaymentRepo(db)
        self.users = UserRepo(db)
        self.cart = CartService(db, store)
        self.store = store
        self.gateways = gateways
        self.receipts = receipts or ReceiptService()
        self.currency = currency

    #query
    def summary(self, ctx: SessionContext) -> dict:
        return {"items": list(ctx.cart), "total": ctx.cart_total, "currency": self.currency}

    def history(self, user_id: int) -> List[OrderModel]:
        return self.orders.list_user_orders(user_id, status="paid")

    def get_user_order(self, ctx: SessionContext, order_id: int) -> OrderModel:
        order = self.orders.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found.")
        if not ctx.user or (order.user_id != ctx.user.id and not ctx.user.is_admin):
            raise PermissionError("Access denied")
        return order

    # =====================================================
    # STRIPE
    # =====================================================
    def start_stripe_checkout(self, ctx: SessionContext, origin: str) -> ProviderOrder:
        self._require_cart(ctx)
        return self.gateways.stripe.create_order(
            ctx.cart_total,
            self.currency,
            line_items=[
                {"name": line.product_name, "price": line.price, "quantity": line.quantity}
                for line in ctx.cart
            ],
            success_url=f"{origin}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{origin}/checkout?canceled=true",
            metadata={"userId": str(ctx.user.id)},
        )

    def complete_stripe_checkout(self, ctx: SessionContext, session_id: str) -> ConfirmedOrder:
        if not session_id:
            raise ValidationError("Missing session_id")

        existing = self._existing_confirmation(ctx, "STRIPE", session_id)
        if existing:
            return existing

        result = self.gateways.stripe.capture_order(session_id)
        if not result.completed or not result.charge_id:
            raise PaymentProviderError("Payment not completed")

        return self.confirm_order(
            ctx,
            CardPayment(
                stripe_session_id=session_id,
                payment_intent_id=result.charge_id,
                amount=result.amount,
                currency=result.currency,
            ),
        )

    # =====================================================
    # PAYPAL
    # =====================================================
    def create_paypal_order(self, ctx: SessionContext) -> ProviderOrder:
        self._require_cart(ctx)
        total = ctx.cart_total
        if total <= 0:
            raise ValidationError("Cart total invalid")
        return self.gateways.paypal.create_order(total, self.currency)

    def capture_paypal_order(self, ctx: SessionContext, order_id: Optional[str]) -> str:
        """Przechwytuje raz; ponowne wywolanie z tym samym id nie przechwytuje drugi raz."""
        if not order_id:
            raise ValidationError("Missing orderID")

        if ctx.paypal_captured_order_id == order_id:
            logger.info(f"PayPal order {order_id} already captured in this session")
            return order_id

        result = self.gateways.paypal.capture_order(order_id)
        if not result.completed:
            raise PaymentProviderError("Payment not completed", details=result.raw)

        ctx.paypal_captured_order_id = order_id
        ctx.paypal_capture_id = result.charge_id
        ctx.paypal_capture_amount = result.amount
        ctx.paypal_capture_currency = result.currency
        self.store.save(ctx)
        return order_id

    def complete_paypal(self, ctx: SessionContext, order_id: Optional[str]) -> ConfirmedOrder:
        """
        Znacznik przechwycenia znika dopiero gdy zamowienie jest zapisane
        albo platnosc zostala zwrocona w confirm_order.
        """
        existing = self._existing_confirmation(ctx, "PAYPAL", order_id) if order_id else None
        if existing:
            self._clear_paypal_capture(ctx)
            return existing

        if not order_id or ctx.paypal_captured_order_id != order_id:
            raise InvalidStateError("PayPal payment was not captured in this session")

        payment = PayPalPayment(
            paypal_order_id=order_id,
            capture_id=ctx.paypal_capture_id,
            amount=ctx.paypal_capture_amount,
            currency=ctx.paypal_capture_currency,
        )
        try:
            confirmed = self.confirm_order(ctx, payment)
        except (EmptyCartError, AmountMismatchError, InsufficientStockError, SQLAlchemyError):
            # platnosc juz skompensowana
            self._clear_paypal_capture(ctx)
            raise

        self._clear_paypal_capture(ctx)
        return confirmed

    # =====================================================
    # HITPAY (PayNow)
    # =====================================================
    def create_hitpay_payment(self, ctx: SessionContext, origin: str) -> ProviderOrder:
        self._require_cart(ctx)
        return self.gateways.hitpay.create_order(
            ctx.cart_total,
            self.currency,
            reference_number=f"user-{ctx.user.id}-{uuid.uuid4().hex[:12]}",
            redirect_url=f"{origin}/hitpay/return",
            webhook_url=f"{origin}/webhooks/hitpay",
            email=ctx.user.email,
        )

    def complete_hitpay(self, ctx: SessionContext, reference: Optional[str], status: Optional[str] = None) -> ConfirmedOrder:
        if not reference:
            raise ValidationError("Missing payment reference")

        existing = self._existing_confirmation(ctx, "HITPAY", reference)
        if existing:
            return existing

        if (status or "").lower() in HITPAY_ABORTED:
            raise PaymentProviderError(f"Payment {status.lower()}")

        result = self.gateways.hitpay.capture_order(reference)
        if result.status != "COMPLETED":
            raise PaymentProviderError(f"Payment not completed (status: {result.status.lower()})")

        return self.confirm_order(
            ctx,
            PayNowPayment(
                payment_request_id=reference,
                payment_id=result.charge_id,
                amount=result.amount,
                currency=result.currency,
            ),
        )

    # =====================================================
    # PRZELEW
    # =====================================================
    def confirm_bank_transfer(self, ctx: SessionContext, screenshot_path: Optional[str]) -> ConfirmedOrder:
        return self.confirm_order(ctx, BankTransferPayment(screenshot_path=screenshot_path))

    # =====================================================
    # CONFIRM
    # =====================================================
    def confirm_order(self, ctx: SessionContext, payment: PaymentDetails) -> ConfirmedOrder:
        """
        Zamowienie, zmniejszenie stanow i wiersz platnosci w jednej transakcji.
        Brak towaru -> rollback calosci i proba zwrotu juz pobranej platnosci.
        Blad paragonu -> zamowienie zostaje, ReceiptGenerationError.
        """
        if not ctx.user:
            raise PermissionError("Please log in to view this resource")

        lines = [line.model_copy() for line in ctx.cart]
        if not lines:
            if payment.provider:
                logger.error(
                    f"{payment.provider} payment {payment.provider_order_id} reached confirmation "
                    f"with an empty cart for user {ctx.user.id}"
                )
                self._compensate(payment)
            raise EmptyCartError()

        total = sum((line.line_total for line in lines), Decimal("0.00"))
        if payment.provider:
            self._check_paid_amount(payment, total)

        screenshot = payment.screenshot_path if isinstance(payment, BankTransferPayment) else None

        order = OrderModel(
            user_id=ctx.user.id,
            items=[line.model_dump(mode="json") for line in lines],
            total=total,
            payment_method=payment.label,
            bank_screenshot=screenshot,
            status="paid",
        )

        try:
            self.orders.add_order(order)

            for line in lines:
                if self.products.decrement_stock(line.product_id, line.quantity) == 0:
                    raise InsufficientStockError(line.product_id, line.product_name)

            if payment.provider:
                self.payments.add_payment(
                    PaymentModel(
                        order_id=order.id,
                        provider=payment.provider,
                        provider_order_id=payment.provider_order_id,
                        provider_reference=payment.provider_reference,
                        provider_payment_id=payment.provider_payment_id,
                        amount=payment.amount,
                        currency=(payment.currency or self.currency).upper(),
                        payment_status="COMPLETED",
                    )
                )

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # rownolegle potwierdzenie tej samej platnosci wygralo wyscig
            existing = (
                self._existing_confirmation(ctx, payment.provider, payment.provider_order_id)
                if payment.provider
                else None
            )
            if existing:
                logger.warning(
                    f"{payment.provider} order {payment.provider_order_id} confirmed concurrently "
                    f"as order {existing.order.id}"
                )
                return existing
            logger.error(f"Could not save order for user {ctx.user.id}: {e}")
            self._compensate(payment, total)
            raise
        except InsufficientStockError as e:
            self.db.rollback()
            logger.error(f"Order for user {ctx.user.id} aborted: {e}")
            self._compensate(payment, total)
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Could not save order for user {ctx.user.id}: {e}")
            self._compensate(payment, total)
            raise

        self.db.refresh(order)
        logger.info(
            f"Order {order.id} confirmed for user {ctx.user.id}: total={total} method={payment.label}"
        )

        self.cart.clear(ctx)

        receipt = self._generate_receipt(order, lines, ctx.user.username, ctx.user.email)
        return ConfirmedOrder(order=order, items=lines, receipt_path=receipt)

    # =====================================================
    # RECEIPTS
    # =====================================================
    def email_receipt(self, ctx: SessionContext, order_id: int, email: str) -> tuple[OrderModel, Optional[str], Optional[str]]:
        """Zwraca (order, email_sent, email_error)."""
        try:
            email = validate_email((email or "").strip(), check_deliverability=False).normalized
        except EmailNotValidError:
            raise ValidationError("Please provide a valid email address.")

        order = self.get_user_order(ctx, order_id)
        lines = [CartLine.model_validate(i) for i in order.items or []]

        path = self.receipts.path_for(order.id)
        if not path.exists():
            name = ctx.user.username if ctx.user else "Guest"
            path = self._generate_receipt(order, lines, name, email)

        ok, error = send_receipt_email(path, email, order.id)
        if not ok:
            return order, None, error or "Failed to send email"
        return order, email, None

    def ensure_receipt(self, ctx: SessionContext, order_id: int) -> Path:
        order = self.get_user_order(ctx, order_id)
        path = self.receipts.path_for(order.id)
        if path.exists():
            return path

        owner = self.users.get_user(order.user_id)
        lines = [CartLine.model_validate(i) for i in order.items or []]
        return self._generate_receipt(
            order,
            lines,
            owner.username if owner else "Customer",
            owner.email if owner else "",
        )

    # =====================================================
    # helpers
    # =====================================================
    def _require_cart(self, ctx: SessionContext):
        if not ctx.user:
            raise PermissionError("Please log in to view this resource")
        if not ctx.cart:
            raise EmptyCartError()

    def _existing_confirmation(self, ctx: SessionContext, provider: str, provider_order_id: str) -> Optional[ConfirmedOrder]:
        """Ponowne wejscie na strone sukcesu: zwracamy istniejace zamowienie zamiast tworzyc nowe."""
        payment = self.payments.get_by_provider_order(provider, provider_order_id)
        if not payment:
            return None

        order = self.orders.get_order(payment.order_id)
        if not ctx.user or order.user_id != ctx.user.id:
            raise PermissionError("Access denied")
        logger.info(f"{provider} order {provider_order_id} already confirmed as order {order.id}")
        lines = [CartLine.model_validate(i) for i in order.items or []]

        path = self.receipts.path_for(order.id)
        if not path.exists():
            owner = self.users.get_user(order.user_id)
            path = self._generate_receipt(
                order, lines, owner.username if owner else "Customer", owner.email if owner else ""
            )
        return ConfirmedOrder(order=order, items=lines, receipt_path=path, already_confirmed=True)

    def _generate_receipt(self, order: OrderModel, lines: List[CartLine], name: str, email: str) -> Path:
        try:
            return self.receipts.generate(
                ReceiptData(
                    order_id=order.id,
                    order_date=order.order_date,
                    items=lines,
                    total=Decimal(order.total),
                    payment_method=order.payment_method,
                    customer_name=name,
                    customer_email=email,
                )
            )
        except Exception as e:
            logger.error(f"Receipt generation for order {order.id} failed: {e}")
            raise ReceiptGenerationError(order.id) from e

    def _clear_paypal_capture(self, ctx: SessionContext):
        if ctx.paypal_captured_order_id is None:
            return
        ctx.paypal_captured_order_id = None
        ctx.paypal_capture_id = None
        ctx.paypal_capture_amount = None
        ctx.paypal_capture_currency = None
        self.store.save(ctx)

    def _check_paid_amount(self, payment: PaymentDetails, total: Decimal):
        """Pobrana kwota musi rownac sie sumie koszyka, inaczej zwrot i odrzucenie."""
        currency = (payment.currency or self.currency).upper()
        paid = Decimal(payment.amount) if payment.amount is not None else None
        if paid == total and currency == self.currency.upper():
            return

        logger.error(
            f"{payment.provider} payment {payment.provider_order_id} captured "
            f"{payment.amount} {currency}, cart total is {total} {self.currency}"
        )
        self._compensate(payment)
        raise AmountMismatchError(payment.amount, total)

    def _compensate(self, payment: PaymentDetails, fallback_amount: Decimal | None = None):
        """Kompensacja: zwrot platnosci pobranej dla zamowienia, ktore nie powstalo."""
        if not payment.provider or not payment.provider_payment_id:
            if payment.provider:
                logger.warning(
                    f"{payment.provider} payment {payment.provider_order_id} captured without charge id, "
                    "manual refund required"
                )
            return

        amount = payment.amount if payment.amount is not None else fallback_amount
        try:
            result = self.gateways.get(payment.provider).refund(
                payment.provider_payment_id,
                amount=amount,
                currency=(payment.currency or self.currency).upper(),
                note="Order could not be fulfilled",
            )
            logger.info(
                f"Compensating refund {result.refund_id} for {payment.provider} "
                f"payment {payment.provider_payment_id}: {result.status}"
            )
        except PaymentProviderError as e:
            logger.warning(
                f"Compensating refund for {payment.provider} payment {payment.provider_payment_id} failed: {e}"
            )
