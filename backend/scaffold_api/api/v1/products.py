"""Product catalog routes"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from scaffold_api.core.database import get_db
from scaffold_api.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from scaffold_api.schemas.user import MessageResponse
from scaffold_api.services.product_service import product_service
from scaffold_api.api.deps import require_access, require_permissions
from scaffold_api.models.user import User

router = APIRouter()

CATALOG_EDITORS = ("admin", "moderator")


@router.get("/", response_model=List[ProductResponse])
def list_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(require_permissions("products:read")),
    db: Session = Depends(get_db)
):
    return product_service.list_products(db, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    current_user: User = Depends(require_permissions("products:read")),
    db: Session = Depends(get_db)
):
    return product_service.get_product(db, product_id)


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    current_user: User = Depends(require_access(roles=CATALOG_EDITORS, permissions=["products:create"])),
    db: Session = Depends(get_db)
):
    return product_service.create_product(db, body)


@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    body: ProductUpdate,
    current_user: User = Depends(require_access(roles=CATALOG_EDITORS, permissions=["products:update"])),
    db: Session = Depends(get_db)
):
    return product_service.update_product(db, product_id, body)


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int,
    current_user: User = Depends(require_access(roles=["admin"], permissions=["products:delete"])),
    db: Session = Depends(get_db)
):
    product_service.delete_product(db, product_id)
    return MessageResponse(message=f"Product {product_id} deleted successfully")
