# storefront/api/routers/checkout.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from storefront.api.deps import get_gateways, get_session_store, http_error, require_user
from storefront.api.uploads import save_upload
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CheckoutOut, EmailReceiptIn, OrderOut, ReceiptOut
from storefront.domain.session import SessionContext
from storefront.services.checkout_service import CheckoutService, ConfirmedOrder
from storefront.services.payments import PaymentGateways
from storefront.services.receipt_service import receipt_download_path
from storefront.services.session_store import SessionStore
from storefront.utils.settings import PAYPAL_CLIENT_ID, UPLOADS_DIR

router = APIRouter(tags=["checkout"])


def get_service(
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    gateways: PaymentGateways = Depends(get_gateways),
) -> CheckoutService:
    return CheckoutService(db, store, gateways)


def origin_of(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def receipt_out(confirmed: ConfirmedOrder) -> ReceiptOut:
    order = confirmed.order
    return ReceiptOut(
        order_id=order.id,
        items=confirmed.items,
        total=order.total,
        payment_method=order.payment_method,
        receipt_download_path=receipt_download_path(order.id),
    )


@router.get("/checkout", response_model=CheckoutOut)
def show_checkout(
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    return CheckoutOut(**svc.summary(ctx), paypal_client_id=PAYPAL_CLIENT_ID or None)


@router.post("/checkout/confirm", response_model=ReceiptOut, status_code=201)
def confirm_bank_transfer(
    bankScreenshot: Optional[UploadFile] = File(None),
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    """Przelew bankowy, zrzut ekranu opcjonalny."""
    try:
        screenshot = save_upload(bankScreenshot, UPLOADS_DIR)
        return receipt_out(svc.confirm_bank_transfer(ctx, screenshot))
    except (StorefrontError, PermissionError, ValueError) as e:
        raise http_error(e)


# =====================================================
# STRIPE
# =====================================================
@router.post("/checkout/create-stripe-session")
def create_stripe_session(
    request: Request,
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    try:
        session = svc.start_stripe_checkout(ctx, origin_of(request))
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)
    return {"url": session.redirect_url}


@router.get("/checkout/success", response_model=ReceiptOut)
def stripe_success(
    session_id: Optional[str] = Query(None),
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    try:
        return receipt_out(svc.complete_stripe_checkout(ctx, session_id))
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)


# =====================================================
# HISTORIA / PARAGONY
# =====================================================
@router.get("/orders", response_model=List[OrderOut])
def order_history(
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    out = []
    for order in svc.history(ctx.user.id):
        row = OrderOut.model_validate(order)
        row.receipt_link = receipt_download_path(order.id)
        out.append(row)
    return out


@router.get("/receipts/{order_id}")
def download_receipt(
    order_id: int,
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    try:
        path = svc.ensure_receipt(ctx, order_id)
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)
    return FileResponse(path, media_type="application/pdf", filename=path.name)


@router.post("/email-receipt/{order_id}", response_model=ReceiptOut)
def email_receipt(
    order_id: int,
    payload: EmailReceiptIn,
    ctx: SessionContext = Depends(require_user),
    svc: CheckoutService = Depends(get_service),
):
    try:
        order, sent, error = svc.email_receipt(ctx, order_id, payload.email)
    except (StorefrontError, PermissionError) as e:
        raise http_error(e)

    return ReceiptOut(
        order_id=order.id,
        items=order.items or [],
        total=order.total,
        payment_method=order.payment_method,
        receipt_download_path=receipt_download_path(order.id),
        email_sent=sent,
        email_error=error,
    )
