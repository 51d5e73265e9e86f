"""Product catalog service"""

from typing import List
import logging

from sqlalchemy.orm import Session

from scaffold_api.core.exceptions import ResourceNotFoundError
from scaffold_api.models.product import Product
from scaffold_api.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """CRUD over the product catalog"""

    @staticmethod
    def list_products(db: Session, skip: int = 0, limit: int = 100) -> List[Product]:
        return db.query(Product).order_by(Product.id.asc()).offset(skip).limit(limit).all()

    @staticmethod
    def get_product(db: Session, product_id: int) -> Product:
        """
        Get a product by id

        Raises:
            ResourceNotFoundError: If no product has this id
        """
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise ResourceNotFoundError("Product")
        return product

    @staticmethod
    def create_product(db: Session, data: ProductCreate) -> Product:
        product = Product(**data.model_dump())
        db.add(product)
        db.commit()
        db.refresh(product)
        logger.info(f"Created product: {product.id}")
        return product

    @staticmethod
    def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
        product = ProductService.get_product(db, product_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def delete_product(db: Session, product_id: int) -> None:
        product = ProductService.get_product(db, product_id)
        db.delete(product)
        db.commit()
        logger.info(f"Deleted product: {product_id}")


product_service = ProductService()
