from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal, Optional
from datetime import datetime


Size = Literal["S", "M", "L", "XL", "XXL", "Free Size"]


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str
    category: str = Field(..., min_length=1)
    brand: Optional[str] = None
    price: float = Field(..., gt=0)
    discount_price: Optional[float] = Field(default=None, gt=0)
    sizes: List[Size] = Field(default_factory=list)
    stock: int = Field(default=0, ge=0)
    colors: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    discount_price: Optional[float] = Field(None, gt=0)
    sizes: Optional[List[Size]] = None
    stock: Optional[int] = Field(None, ge=0)
    colors: Optional[List[str]] = None
    images: Optional[List[str]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1)


class ReviewResponse(BaseModel):
    user_id: int
    name: str
    rating: int
    comment: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductResponse(BaseModel):
    id: int
    name: str
    description: str
    category: str
    brand: Optional[str] = None
    price: float
    discount_price: Optional[float] = None
    sizes: List[str]
    stock: int
    colors: List[str]
    images: List[str]
    rating: float
    num_reviews: int
    is_active: bool
    is_featured: bool

    model_config = ConfigDict(from_attributes=True)


class ProductReviewsResponse(BaseModel):
    reviews: List[ReviewResponse]
    rating: float
    num_reviews: int
