from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import datetime
from typing import Optional
from .notification_schemas import Notification


class Product(BaseModel):
    """Stock item from /api/v1/products (or the legacy /api/products)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    description: Optional[str] = None
    category: str = ""
    supplier: Optional[str] = None
    min_stock: float = 0
    current_stock: float = 0
    unit_price: Optional[float] = None
    unit_of_measure: str = "unidade"
    barcode: Optional[str] = None
    is_active: bool = True
    stock_status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def effective_stock_status(self) -> str:
        if self.current_stock <= 0:
            return "out_of_stock"
        if self.stock_status:
            return self.stock_status
        if self.current_stock <= self.min_stock:
            return "low_stock"
        return "normal"


class ProductWrite(BaseModel):
    # POST /api/v1/products and PUT /api/v1/products/{id}
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1)
    description: Optional[str] = None
    supplier: Optional[str] = None
    min_stock: int = Field(0, ge=0)
    current_stock: int = Field(0, ge=0)
    unit_price: Optional[float] = Field(None, ge=0)
    unit_of_measure: str = "unidade"
    barcode: Optional[str] = None
    is_active: bool = True


class ProductOutcome(BaseModel):
    """Same contract as MutationOutcome, carrying the reloaded product list."""

    success: bool
    notifications: list[Notification] = Field(default_factory=list)
    products: Optional[list[Product]] = None
    status_code: int = Field(200, exclude=True)


__all__ = ["Product", "ProductWrite", "ProductOutcome"]
