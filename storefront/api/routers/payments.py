# storefront/api/routers/payments.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from storefront.api.deps import get_gateways, http_error, require_user
from storefront.api.routers.checkout import get_service, origin_of, receipt_out
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import PayPalCaptureIn, ReceiptOut
from storefront.domain.session import SessionContext
from storefront.services.checkout_service import CheckoutService
from storefront.services.payment_service import PaymentService
from storefront.services.payments import PaymentGateways
from storefront.services.payments.hitpay_provider import EVENT_OBJECT_HEADER, SIGNATURE_HEADER
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["payments"])


# =====================================================
# PAYPAL
# =====================================================
@router.post("/api/paypal/create-order")
def paypal_create_order(
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    """Kwota liczona po stronie serwera z koszyka w sesji."""
    try:
        order = svc.create_paypal_order(ctx)
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)
    return {"id": order.id}


@router.post("/api/paypal/capture-order")
def paypal_capture_order(
    payload: PayPalCaptureIn,
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    try:
        order_id = svc.capture_paypal_order(ctx, payload.orderID)
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)
    return {"id": order_id, "status": "COMPLETED"}


@router.get("/paypal/success", response_model=ReceiptOut)
def paypal_success(
    orderID: Optional[str] = Query(None),
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    try:
        return receipt_out(svc.complete_paypal(ctx, orderID))
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)


# =====================================================
# HITPAY (PayNow)
# =====================================================
@router.post("/api/hitpay/create-payment")
def hitpay_create_payment(
    request: Request,
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    try:
        payment = svc.create_hitpay_payment(ctx, origin_of(request))
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)
    return {"id": payment.id, "url": payment.redirect_url}


@router.get("/hitpay/return", response_model=ReceiptOut)
def hitpay_return(
    reference: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    try:
        return receipt_out(svc.complete_hitpay(ctx, reference, status))
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)


@router.post("/webhooks/hitpay")
async def hitpay_webhook(
    request: Request,
    db: Session = Depends(get_db),
    gateways: PaymentGateways = Depends(get_gateways),
):
    """Podpis liczony z surowego body, dlatego bez parsowania przez pydantic."""
    raw_body = await request.body()
    try:
        updated = PaymentService(db, gateways).handle_hitpay_webhook(
            raw_body,
            request.headers.get(SIGNATURE_HEADER),
            request.headers.get(EVENT_OBJECT_HEADER),
        )
    except StorefrontError as e:
        logger.warning(f"HitPay webhook rejected: {e}")
        raise http_error(e)
    return {"ok": True, "updated": updated}
