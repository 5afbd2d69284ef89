# storefront/api/deps.py
from fastapi import Depends, HTTPException, Request

from storefront.domain.errors import (
    AmountMismatchError,
    EmptyCartError,
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    PaymentProviderError,
    ReceiptGenerationError,
    SignatureVerificationError,
    StorefrontError,
    ValidationError,
)
from storefront.domain.session import SessionContext
from storefront.services.payments import PaymentGateways
from storefront.services.session_store import SessionStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_session_store: SessionStore | None = None
_gateways: PaymentGateways | None = None


def get_session_store() -> SessionStore:
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store


def get_gateways() -> PaymentGateways:
    global _gateways
    if _gateways is None:
        _gateways = PaymentGateways()
    return _gateways


def get_session_context(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> SessionContext:
    """Cookie niesie tylko sid, caly stan siedzi w redisie."""
    sid = request.session.get("sid")
    if not sid:
        sid = store.new_session_id()
        request.session["sid"] = sid
    return store.load(sid)


def require_user(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.user:
        raise HTTPException(status_code=401, detail="Please log in to view this resource")
    return ctx


def require_admin(ctx: SessionContext = Depends(require_user)) -> SessionContext:
    if not ctx.user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied")
    return ctx


def http_error(e: Exception) -> HTTPException:
    """Mapowanie wyjatkow domeny na odpowiedzi HTTP."""
    if isinstance(e, PermissionError):
        return HTTPException(status_code=403, detail=str(e) or "Access denied")
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (InsufficientStockError, AmountMismatchError)):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, PaymentProviderError):
        detail = {"error": str(e), "details": e.details} if e.details else str(e)
        return HTTPException(status_code=502, detail=detail)
    if isinstance(e, ReceiptGenerationError):
        return HTTPException(status_code=500, detail={"error": str(e), "order_id": e.order_id})
    if isinstance(e, (ValidationError, InvalidStateError, EmptyCartError, SignatureVerificationError, ValueError)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, StorefrontError):
        return HTTPException(status_code=400, detail=str(e))
    logger.error(f"Unmapped error: {e!r}")
    return HTTPException(status_code=500, detail="Internal server error")
