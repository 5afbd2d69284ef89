# storefront/api/routers/users.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from storefront.api.deps import (
    get_session_context,
    get_session_store,
    http_error,
    require_admin,
    require_user,
)
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import LoginIn, MessageOut, UserCreate, UserRead
from storefront.domain.session import SessionContext, SessionUser
from storefront.services.cart_service import CartService
from storefront.services.session_store import SessionStore
from storefront.services.user_service import UserService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["users"])


@router.post("/register", response_model=UserRead, status_code=201)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    """Rola zawsze 'user', admina nie da sie zarejestrowac z zewnatrz."""
    service = UserService(db)
    try:
        return service.register(payload)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/login", response_model=UserRead)
def login(
    payload: LoginIn,
    request: Request,
    ctx: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    try:
        user = UserService(db).authenticate(payload.email, payload.password)
    except StorefrontError as e:
        raise HTTPException(status_code=401, detail=str(e))

    # nowy sid po zalogowaniu
    store.destroy(ctx.session_id)
    ctx = SessionContext(
        session_id=store.new_session_id(),
        user=SessionUser(id=user.id, username=user.username, email=user.email, role=user.role),
    )
    request.session["sid"] = ctx.session_id

    CartService(db, store).load_from_store(ctx, user.id)
    logger.info(f"User {user.id} logged in")
    return UserRead.model_validate(user)


@router.get("/logout", response_model=MessageOut)
def logout(
    request: Request,
    ctx: SessionContext = Depends(get_session_context),
    store: SessionStore = Depends(get_session_store),
):
    store.destroy(ctx.session_id)
    request.session.clear()
    if ctx.user:
        logger.info(f"User {ctx.user.id} logged out")
    return MessageOut(messages=["You have been logged out."])


@router.get("/me", response_model=UserRead)
def me(ctx: SessionContext = Depends(require_user), db: Session = Depends(get_db)):
    try:
        return UserService(db).get_user(ctx.user.id)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/users/{user_id}", response_model=UserRead)
def get_user(user_id: int, ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return UserService(db).get_user(user_id)
    except StorefrontError as e:
        raise http_error(e)
