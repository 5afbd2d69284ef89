# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.services.mail_service import send_refund_approved_email
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia klienta wysylane asynchronicznie przez Celery.
    Blad wyslania nie wplywa na operacje, ktora go wywolala.
    """

    @staticmethod
    def send_refund_approved(to_email: str, username: str | None, order_id: int, refund_request_id: int) -> bool:
        try:
            send_refund_approved_task.delay(to_email, username, order_id, refund_request_id)
        except Exception as e:
            logger.warning(f"Refund email for request {refund_request_id} not queued: {e}")
            return False
        return True


@celery_app.task(name="storefront.services.notification_service.send_refund_approved_task")
def send_refund_approved_task(to_email: str, username: str | None, order_id: int, refund_request_id: int):
    ok, error = send_refund_approved_email(to_email, username, order_id, refund_request_id)
    if not ok:
        logger.warning(f"[NOTIFICATION] Refund email for request {refund_request_id} failed: {error}")
    else:
        logger.info(f"[NOTIFICATION] User {to_email}: refund request {refund_request_id} approved")
    return {"order_id": order_id, "refund_request_id": refund_request_id, "sent": ok}
