# storefront/api/__init__.py
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from storefront.api.routers import carts, catalog, checkout, health, payments, refunds, users
from storefront.utils.settings import (
    IMAGES_DIR,
    RECEIPTS_DIR,
    SECRET_KEY,
    SESSION_TTL_SECONDS,
    STATIC_DIR,
    UPLOADS_DIR,
)


def create_app() -> FastAPI:
    app = FastAPI(title="Storefront", version="1.0.0")

    app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY, max_age=SESSION_TTL_SECONDS)

    for directory in (STATIC_DIR, IMAGES_DIR, UPLOADS_DIR, RECEIPTS_DIR):
        directory.mkdir(parents=True, exist_ok=True)
    # paragony tylko przez /receipts/{id} (sprawdzanie wlasciciela), nie przez static
    app.mount("/images", StaticFiles(directory=IMAGES_DIR), name="images")

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(catalog.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(payments.router)
    app.include_router(refunds.router)
    return app
