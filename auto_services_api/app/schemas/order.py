"""
Pydantic models for auto-parts orders.

``total_price`` is accepted on input for compatibility with existing
clients but is always recomputed from the items by ``OrderService``.
"""

from enum import Enum
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field

from .common import RequestModel


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class OrderItem(RequestModel):
    product_name: str = Field(..., min_length=1, examples=["Brake pads"])
    quantity: int = Field(..., ge=1, examples=[2])
    unit_price: float = Field(..., ge=0, examples=[45.5])


class OrderCreate(RequestModel):
    items: List[OrderItem] = Field(..., min_length=1)
    total_price: Optional[float] = Field(None, description="Ignored; recomputed from items")


class OrderUpdate(RequestModel):
    """Schema for updating an order; omitted fields are left unchanged."""

    items: Optional[List[OrderItem]] = Field(None, min_length=1)
    status: Optional[OrderStatus] = None
    total_price: Optional[float] = Field(None, description="Ignored; recomputed from items")


class OrderRead(BaseModel):
    id: int
    client_id: int
    items: List[OrderItem]
    total_price: float
    status: OrderStatus
    order_date: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderRead":
        return cls.model_validate({key: row.get(key) for key in cls.model_fields})
