# storefront/api/routers/catalog.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from storefront.api.deps import http_error, require_admin, require_user
from storefront.api.uploads import save_upload
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import MessageOut, ProductOut
from storefront.domain.session import SessionContext
from storefront.services.catalog_service import CatalogService
from storefront.utils.settings import IMAGES_DIR

router = APIRouter(tags=["catalog"])


def get_service(db: Session):
    return CatalogService(db)


@router.get("/shopping", response_model=List[ProductOut])
def shopping(ctx: SessionContext = Depends(require_user), db: Session = Depends(get_db)):
    return get_service(db).list_products()


@router.get("/inventory", response_model=List[ProductOut])
def inventory(ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    return get_service(db).list_products()


@router.get("/product/{product_id}", response_model=ProductOut)
def get_product(product_id: int, ctx: SessionContext = Depends(require_user), db: Session = Depends(get_db)):
    try:
        return get_service(db).get_product(product_id)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/addProduct", response_model=ProductOut, status_code=201)
def add_product(
    name: str = Form(...),
    quantity: str = Form(...),
    price: str = Form(...),
    image: Optional[UploadFile] = File(None),
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        stored = save_upload(image, IMAGES_DIR)
        return get_service(db).add_product(name, quantity, price, stored)
    except (StorefrontError, ValueError) as e:
        raise http_error(e)


@router.post("/updateProduct/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    name: str = Form(...),
    quantity: str = Form(...),
    price: str = Form(...),
    image: Optional[UploadFile] = File(None),
    ctx: SessionContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Bez nowego pliku zostaje dotychczasowy obrazek."""
    try:
        stored = save_upload(image, IMAGES_DIR)
        return get_service(db).update_product(product_id, name, quantity, price, stored)
    except (StorefrontError, ValueError) as e:
        raise http_error(e)


@router.api_route("/deleteProduct/{product_id}", methods=["GET", "POST"], response_model=MessageOut)
def delete_product(product_id: int, ctx: SessionContext = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        get_service(db).delete_product(product_id)
    except StorefrontError as e:
        raise http_error(e)
    return MessageOut(messages=["Product deleted."])
