from pydantic import BaseModel, Field, ConfigDict
from typing import List


class CartItemRequest(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(default=1, gt=0)
    size: str = Field(..., min_length=1)


class CartItemResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    size: str

    model_config = ConfigDict(from_attributes=True)


class CartResponse(BaseModel):
    items: List[CartItemResponse] = []

    model_config = ConfigDict(from_attributes=True)
