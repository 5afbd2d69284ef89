# storefront/services/mail_service.py
from pathlib import Path
from typing import Dict, Optional, Tuple

import resend

from storefront.utils.settings import MAIL_SENDER, RESEND_API_KEY, SHOP_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def send_email(payload: Dict[str, object], api_key: str | None = None) -> Tuple[bool, Optional[str]]:
    configured_api_key = (api_key if api_key is not None else RESEND_API_KEY).strip()
    if not configured_api_key:
        return False, "Email API key is not configured."

    resend.api_key = configured_api_key
    try:
        response = resend.Emails.send(payload)
    except Exception as exc:
        logger.error(f"Email to {payload.get('to')} failed: {exc}")
        return False, str(exc)

    if not isinstance(response, dict) or not response.get("id"):
        logger.error(f"Email to {payload.get('to')} rejected: {response}")
        return False, str(response)

    logger.info(f"Email {response['id']} sent to {payload.get('to')}")
    return True, None


def send_receipt_email(pdf_path: Path, to_email: str, order_id: int) -> Tuple[bool, Optional[str]]:
    payload: Dict[str, object] = {
        "from": MAIL_SENDER,
        "to": [to_email],
        "subject": f"Your {SHOP_NAME.title()} Receipt (Order #{order_id})",
        "text": "Thank you for your order! Attached is your receipt.",
        "attachments": [
            {
                "filename": f"receipt-{order_id}.pdf",
                "content": list(Path(pdf_path).read_bytes()),
            }
        ],
    }
    return send_email(payload)


def send_refund_approved_email(
    to_email: str,
    username: Optional[str],
    order_id: int,
    refund_request_id: int,
) -> Tuple[bool, Optional[str]]:
    if not to_email:
        return False, "Missing recipient"

    text = (
        f"Hi {username or 'Customer'},\n\n"
        f"Your refund request (Request #{refund_request_id}) has been approved for Order #{order_id}.\n"
        "The refund will be processed within 3 working days.\n\n"
        "Thank you,\n"
        f"{SHOP_NAME.title()} Support"
    )
    payload: Dict[str, object] = {
        "from": MAIL_SENDER,
        "to": [to_email],
        "subject": f"Refund approved (Order #{order_id})",
        "text": text,
    }
    return send_email(payload)
