# storefront/api/routers/carts.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_session_store, http_error, require_user
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import CartOut, ItemIn
from storefront.domain.session import SessionContext
from storefront.services.cart_service import CartService
from storefront.services.session_store import SessionStore

router = APIRouter(tags=["cart"])


def get_service(db: Session, store: SessionStore):
    return CartService(db, store)


def _cart_out(svc: CartService, ctx: SessionContext, messages=None) -> CartOut:
    return CartOut(items=svc.list(ctx), total=svc.total(ctx), messages=messages or [])


@router.get("/cart", response_model=CartOut)
def view_cart(
    ctx: SessionContext = Depends(require_user),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    svc = get_service(db, store)
    return _cart_out(svc, ctx)


@router.post("/add-to-cart/{product_id}", response_model=CartOut)
def add_to_cart(
    product_id: int,
    payload: Optional[ItemIn] = None,
    ctx: SessionContext = Depends(require_user),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    svc = get_service(db, store)
    try:
        messages = svc.add(ctx, product_id, payload.quantity if payload else None)
    except StorefrontError as e:
        raise http_error(e)
    return _cart_out(svc, ctx, messages)


@router.post("/update-cart/{product_id}", response_model=CartOut)
def update_cart(
    product_id: int,
    payload: Optional[ItemIn] = None,
    ctx: SessionContext = Depends(require_user),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    svc = get_service(db, store)
    messages = svc.update(ctx, product_id, payload.quantity if payload else None)
    return _cart_out(svc, ctx, messages)


@router.post("/cart/remove/{product_id}", response_model=CartOut)
def remove_from_cart(
    product_id: int,
    ctx: SessionContext = Depends(require_user),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    svc = get_service(db, store)
    messages = svc.remove(ctx, product_id)
    return _cart_out(svc, ctx, messages)


@router.post("/cart/clear", response_model=CartOut)
def clear_cart(
    ctx: SessionContext = Depends(require_user),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    svc = get_service(db, store)
    svc.clear(ctx)
    return _cart_out(svc, ctx, ["Cart cleared."])
