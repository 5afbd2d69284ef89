# storefront/api/routers/refunds.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_gateways, http_error, require_admin, require_user
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    MessageOut,
    OrderOut,
    RefundRequestIn,
    RefundRequestOut,
    RejectRefundIn,
)
from storefront.domain.session import SessionContext
from storefront.services.admin_service import AdminService
from storefront.services.payments import PaymentGateways
from storefront.services.refund_service import RefundService

router = APIRouter(tags=["refunds"])


def get_service(
    db: Session = Depends(get_db),
    gateways: PaymentGateways = Depends(get_gateways),
) -> RefundService:
    return RefundService(db, gateways)


# =====================================================
# KLIENT
# =====================================================
@router.get("/customer-service")
def customer_service(
    ctx: SessionContext = Depends(require_user),
    svc: RefundService = Depends(get_service),
):
    data = svc.customer_service(ctx.user.id)
    return {
        "orders": [OrderOut.model_validate(o) for o in data["orders"]],
        "requests": [RefundRequestOut.model_validate(r) for r in data["requests"]],
    }


@router.post("/refund-requests", response_model=RefundRequestOut, status_code=201)
def create_refund_request(
    payload: RefundRequestIn,
    ctx: SessionContext = Depends(require_user),
    svc: RefundService = Depends(get_service),
):
    try:
        return svc.create_request(ctx.user.id, payload.order_id, payload.reason)
    except StorefrontError as e:
        raise http_error(e)


# =====================================================
# ADMIN
# =====================================================
@router.get("/admin/dashboard")
def admin_dashboard(ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    data = AdminService(db).dashboard()
    return {
        "products": [
            {"id": p.id, "name": p.name, "quantity": p.quantity, "price": p.price, "image": p.image}
            for p in data["products"]
        ],
        "orders": data["orders"],
    }


@router.get("/admin/orders")
def admin_orders(ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    return AdminService(db).list_orders()


@router.get("/admin/refunds")
def admin_refunds(
    ctx: SessionContext = Depends(require_admin),
    svc: RefundService = Depends(get_service),
):
    return svc.list_requests()


@router.post("/admin/refunds/{request_id}/approve", response_model=MessageOut)
def approve_refund(
    request_id: int,
    ctx: SessionContext = Depends(require_admin),
    svc: RefundService = Depends(get_service),
):
    """Blad dostawcy wraca do admina w surowej postaci, stan bez zmian."""
    try:
        message = svc.approve(request_id, ctx.user)
    except StorefrontError as e:
        raise http_error(e)
    return MessageOut(messages=[message])


@router.post("/admin/refunds/{request_id}/reject", response_model=MessageOut)
def reject_refund(
    request_id: int,
    payload: Optional[RejectRefundIn] = None,
    ctx: SessionContext = Depends(require_admin),
    svc: RefundService = Depends(get_service),
):
    try:
        message = svc.reject(request_id, payload.admin_note if payload else None)
    except StorefrontError as e:
        raise http_error(e)
    return MessageOut(messages=[message])
