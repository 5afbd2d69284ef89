# storefront/services/refund_service.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.models.refund import RefundModel
from storefront.data.models.refund_request import RefundRequestModel
from storefront.domain.errors import InvalidStateError, NotFoundError, ValidationError
from storefront.domain.session import SessionUser
from storefront.repos.order_repo import OrderRepo
from storefront.repos.payment_repo import PaymentRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.refund_repo import RefundRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.notification_service import NotificationService
from storefront.services.payment_service import PaymentService
from storefront.services.payments import PaymentGateways
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def restock_lines(items) -> list[tuple[int, int]]:
    """(product_id, quantity) z zapisanego snapshotu, pomija niepoprawne pozycje."""
    lines = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        product_id = item.get("product_id")
        try:
            quantity = int(item.get("quantity"))
        except (TypeError, ValueError):
            continue
        if not product_id or quantity <= 0:
            continue
        lines.append((int(product_id), quantity))
    return lines


class RefundService:
    """
    Wnioski o zwrot: pending -> refunded | rejected, bez dalszych przejsc.

    approve:
    1. zwrot u dostawcy (blad dostawcy -> zadnych zmian w bazie)
    2. przywrocenie stanow z snapshotu zamowienia
    3. wiersz audytowy refunds
    4. statusy wniosku i zamowienia
    5. email do klienta (best effort)
    """

    def __init__(
        self,
        db: Session,
        gateways: PaymentGateways,
        notifications: NotificationService | None = None,
    ):
        self.repo = RefundRepo(db)
        self.orders = OrderRepo(db)
        self.payments = PaymentRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.payment_service = PaymentService(db, gateways)
        self.gateways = gateways
        self.notifications = notifications or NotificationService()

    #query
    def customer_service(self, user_id: int) -> dict:
        return {
            "orders": self.orders.list_user_orders(user_id),
            "requests": self.repo.list_user_requests(user_id),
        }

    def list_requests(self) -> list[dict]:
        rows = []
        for rr in self.repo.list_requests():
            user = self.users.get_user(rr.user_id)
            order = self.orders.get_order(rr.order_id)
            payment = self.payments.get_by_order(rr.order_id)
            rows.append(
                {
                    "id": rr.id,
                    "order_id": rr.order_id,
                    "user_id": rr.user_id,
                    "username": user.username if user else None,
                    "email": user.email if user else None,
                    "reason": rr.reason,
                    "status": rr.status,
                    "admin_note": rr.admin_note,
                    "created_at": rr.created_at,
                    "decided_at": rr.decided_at,
                    "order_total": order.total if order else None,
                    "payment_method": order.payment_method if order else None,
                    "order_date": order.order_date if order else None,
                    "provider": payment.provider if payment else None,
                    "provider_order_id": payment.provider_order_id if payment else None,
                    "provider_payment_id": payment.provider_payment_id if payment else None,
                    "amount": payment.amount if payment else None,
                    "currency": payment.currency if payment else None,
                }
            )
        return rows

    #commands
    def create_request(self, user_id: int, order_id: int, reason: str) -> RefundRequestModel:
        reason = (reason or "").strip()
        if not order_id or not reason:
            raise ValidationError("Please select an order and provide a reason.")

        order = self.orders.get_order(order_id)
        if not order or order.user_id != user_id:
            raise NotFoundError("Order not found.")

        if order.status != "paid":
            raise InvalidStateError("Refund can only be requested for paid orders.")

        if self.repo.find_open_request(order_id, user_id):
            raise InvalidStateError("Refund request already exists for this order.")

        created = self.repo.create_request(
            RefundRequestModel(order_id=order_id, user_id=user_id, reason=reason[:255], status="pending")
        )
        logger.info(f"Refund request {created.id} submitted for order {order_id} by user {user_id}")
        return created

    def approve(self, request_id: int, admin: SessionUser) -> str:
        rr = self.repo.get_request(request_id)
        if not rr:
            raise NotFoundError("Refund request not found.")

        if rr.status != "pending":
            raise InvalidStateError("Refund request is not pending.")

        order = self.orders.get_order(rr.order_id)
        if not order:
            raise NotFoundError("Order not found.")

        payment = self.payments.get_by_order(order.id)
        if not payment or not payment.provider:
            raise InvalidStateError(
                "Cannot approve: missing payment info (provider/payment id). "
                "Ensure payment row is inserted after checkout."
            )

        admin_name = admin.username or "admin"
        refundable_id = self.payment_service.resolve_refundable_id(payment)
        provider = self.gateways.get(payment.provider)

        # PaymentProviderError leci wyzej, stan nie zmieniony
        result = provider.refund(
            refundable_id,
            amount=Decimal(payment.amount),
            currency=payment.currency,
            note=f"Refund approved by {admin_name}",
        )
        logger.info(
            f"Refund request {rr.id}: {payment.provider} refund {result.refund_id} status {result.status}"
        )

        rowcount = self.repo.decide_pending(
            rr.id,
            {
                "status": "refunded",
                "admin_note": f"Approved by {admin_name}",
                "decided_at": datetime.now(timezone.utc),
            },
        )
        if rowcount == 0:
            self.repo.rollback()
            logger.error(
                f"Refund request {rr.id} was decided concurrently after provider refund {result.refund_id}"
            )
            raise InvalidStateError("Refund request is not pending.")

        for product_id, quantity in restock_lines(order.items):
            if self.products.increment_stock(product_id, quantity) == 0:
                logger.warning(f"Restock skipped, product {product_id} no longer exists")

        self.repo.add_refund(
            RefundModel(
                refund_request_id=rr.id,
                provider=payment.provider,
                provider_refund_id=result.refund_id,
                amount=payment.amount or order.total,
                currency=payment.currency,
                status=result.status or "COMPLETED",
            )
        )
        self.orders.update_order_status(order.id, "refunded")
        self.repo.commit()
        logger.info(f"Refund request {rr.id} approved by {admin_name}, order {order.id} refunded")

        customer = self.users.get_user(rr.user_id)
        if customer:
            self.notifications.send_refund_approved(customer.email, customer.username, order.id, rr.id)

        return "Refund approved: payment refunded, stock restored, email sent."

    def reject(self, request_id: int, admin_note: str | None = None) -> str:
        note = str(admin_note or "Rejected by admin")[:255]
        rowcount = self.repo.decide_pending(
            request_id,
            {"status": "rejected", "admin_note": note, "decided_at": datetime.now(timezone.utc)},
        )
        if rowcount == 0:
            self.repo.rollback()
            raise InvalidStateError("Refund request not pending / not found.")

        self.repo.commit()
        logger.info(f"Refund request {request_id} rejected: {note}")
        return "Refund rejected."
