
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from app.auth import get_current_user, require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse, ReviewCreate, ProductReviewsResponse
from app.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=List[ProductResponse])
def list_products(
    category: Optional[str] = None,
    size: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return ProductService.list_products(db, category, size, min_price, max_price, search)


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return ProductService.create_product(db, payload)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ProductService.get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return ProductService.update_product(db, product_id, payload)


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    ProductService.delete_product(db, product_id)
    return {"message": "Product removed"}


@router.post("/{product_id}/reviews", response_model=MessageResponse, status_code=201)
def add_review(product_id: int, payload: ReviewCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    ProductService.add_review(db, product_id, user, payload)
    return {"message": "Review added successfully"}


@router.get("/{product_id}/reviews", response_model=ProductReviewsResponse)
def list_reviews(product_id: int, db: Session = Depends(get_db)):
    product = ProductService.get_product(db, product_id)
    return {"reviews": product.reviews, "rating": product.rating, "num_reviews": product.num_reviews}


@router.get("/{product_id}/similar", response_model=List[ProductResponse])
def similar_products(product_id: int, db: Session = Depends(get_db)):
    return ProductService.similar_products(db, product_id)
