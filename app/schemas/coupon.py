from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Literal, Optional
from datetime import datetime


DiscountType = Literal["percentage", "fixed"]


# Request schemas
class CouponCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    description: str = Field(default="")
    discount_type: DiscountType
    discount_value: float = Field(..., gt=0, description="Percentage or fixed amount")
    min_order_value: float = Field(default=0, ge=0)
    max_discount: Optional[float] = Field(default=None, gt=0, description="Cap for percentage coupons")
    usage_limit: Optional[int] = Field(default=None, ge=1, description="None means unlimited")
    valid_from: datetime
    valid_until: datetime
    is_active: bool = True

    @model_validator(mode="after")
    def check_window(self):
        if self.valid_until <= self.valid_from:
            raise ValueError("valid_until must be after valid_from")
        if self.discount_type == "percentage" and self.discount_value > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self


class CouponUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=64)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, gt=0)
    min_order_value: Optional[float] = Field(None, ge=0)
    max_discount: Optional[float] = Field(None, gt=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1)
    order_amount: float = Field(..., ge=0)


# Response schemas
class CouponResponse(BaseModel):
    id: int
    code: str
    description: str
    discount_type: str
    discount_value: float
    min_order_value: float
    max_discount: Optional[float] = None
    usage_limit: Optional[int] = None
    used_count: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool

    # Pydantic v2 style config (replaces class Config)
    model_config = ConfigDict(from_attributes=True)


class PublicCouponResponse(BaseModel):
    """Active-coupon listing; hides usage counters"""
    code: str
    description: str
    discount_type: str
    discount_value: float
    min_order_value: float
    max_discount: Optional[float] = None
    valid_until: datetime

    model_config = ConfigDict(from_attributes=True)


class CouponValidateResponse(BaseModel):
    valid: bool
    code: str
    description: str
    discount: float
    final_amount: float


class ApplyCouponResponse(BaseModel):
    valid: bool
    code: str
    description: str
    discount: float


