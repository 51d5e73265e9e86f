"""Product schemas"""

from pydantic import BaseModel, Field
from typing import Optional


class ProductCreate(BaseModel):
    """Product creation schema"""
    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., gt=0)
    unit: str = Field(..., min_length=1, max_length=10)
    price: float = Field(..., gt=0)
    currency: str = Field(..., min_length=3, max_length=3)
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Partial product update"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=10)
    price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    quantity: float
    unit: str
    price: float
    currency: str
    is_active: bool

    class Config:
        from_attributes = True
