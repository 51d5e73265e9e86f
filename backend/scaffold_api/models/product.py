"""Product catalog model"""

from sqlalchemy import Column, Integer, String, Float, Boolean, CheckConstraint
from scaffold_api.core.database import Base


class Product(Base):
    """Catalog entry"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String(10), nullable=False)
    price = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_product_quantity"),
        CheckConstraint("price >= 0", name="chk_product_price"),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}')>"
