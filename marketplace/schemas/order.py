from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, field_validator

from marketplace.models.order import OrderStatus


class OrderLine(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    # hint only; the fulfilling vendor is always taken from the product
    vendor_id: int | None = None


class OrderCreate(BaseModel):
    items: List[OrderLine] = Field(min_length=1)
    shipping_address: str = Field(min_length=1, max_length=500)
    shipping_city: str = Field(min_length=1, max_length=100)
    shipping_zip: str = Field(min_length=1, max_length=20)
    shipping_country: str = Field(min_length=1, max_length=100)
    payment_method: str = Field(min_length=1, max_length=50)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        # same vocabulary as the service, matched case-insensitively
        if isinstance(v, str):
            return v.upper()
        return v


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    vendor_id: int
    quantity: int
    unit_price: float
    line_total: float


class OrderResponse(BaseModel):
    id: int
    order_number: str
    customer_id: int
    items: List[OrderItemResponse]
    total_amount: float
    shipping_address: str
    shipping_city: str
    shipping_zip: str
    shipping_country: str
    payment_method: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
