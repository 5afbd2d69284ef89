# storefront/services/payment_service.py
from sqlalchemy.orm import Session

from storefront.data.models.payment import PaymentModel
from storefront.domain.errors import InvalidStateError, PaymentProviderError
from storefront.repos.payment_repo import PaymentRepo
from storefront.services.payments import PaymentGateways
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SETTLED_STATUSES = ("completed", "succeeded")


class PaymentService:
    """
    Dwufazowy identyfikator platnosci:
    provider_reference (tymczasowy) -> provider_payment_id (kanoniczny, do zwrotow).
    Upgrade robi webhook HitPay albo zapytanie o status tuz przed zwrotem.
    """

    def __init__(self, db: Session, gateways: PaymentGateways):
        self.repo = PaymentRepo(db)
        self.gateways = gateways

    def handle_hitpay_webhook(self, raw_body: bytes, signature: str | None, event_object: str | None) -> bool:
        """
        Zwraca True gdy platnosc zostala zaktualizowana.
        Zdarzenia ktorych nie da sie przypisac sa potwierdzane (False), zeby HitPay nie ponawial.
        SignatureVerificationError leci wyzej.
        """
        event = self.gateways.hitpay.parse_webhook(raw_body, signature, event_object)
        request_id = event.get("payment_request_id")
        payment_id = event.get("payment_id")

        if not request_id or not payment_id:
            logger.info(f"HitPay webhook unmappable event ignored: {event}")
            return False

        if event.get("status") not in SETTLED_STATUSES:
            logger.info(f"HitPay webhook for {request_id} with status {event.get('status')} ignored")
            return False

        payment = self.repo.get_by_provider_order("HITPAY", request_id)
        if not payment:
            logger.info(f"HitPay webhook for unknown payment request {request_id} acknowledged")
            return False

        if payment.is_resolved:
            if payment.provider_payment_id != payment_id:
                logger.warning(
                    f"HitPay webhook for {request_id} reports charge {payment_id}, "
                    f"payment already resolved to {payment.provider_payment_id}"
                )
            return False

        payment.resolve(payment_id)
        payment.payment_status = "COMPLETED"
        self.repo.commit()
        logger.info(f"HitPay payment for order {payment.order_id} resolved to charge {payment_id}")
        return True

    def resolve_refundable_id(self, payment: PaymentModel) -> str:
        if payment.is_resolved:
            return payment.refundable_id

        if payment.provider != "HITPAY":
            raise InvalidStateError(
                "Cannot approve: missing payment info (provider/payment id). "
                "Ensure payment row is inserted after checkout."
            )

        if not payment.provider_reference:
            raise InvalidStateError("Cannot approve: HitPay payment has no payment request reference.")

        charge_id = self.gateways.hitpay.resolve_charge_id(payment.provider_reference)
        if not charge_id:
            raise PaymentProviderError(
                f"HitPay payment request {payment.provider_reference} has no settled charge yet"
            )

        payment.resolve(charge_id)
        self.repo.commit()
        logger.info(f"HitPay payment for order {payment.order_id} resolved just in time to charge {charge_id}")
        return charge_id
