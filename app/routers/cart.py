
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.cart import CartItemRequest, CartResponse
from app.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
def get_cart(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    cart = CartService.get_cart(db, user.id)
    if cart is None:
        return CartResponse(items=[])
    return cart


@router.post("/add", response_model=CartResponse, status_code=201)
def add_to_cart(payload: CartItemRequest, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return CartService.add_item(db, user.id, payload)


@router.put("/update", response_model=CartResponse)
def update_cart_item(payload: CartItemRequest, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return CartService.update_item(db, user.id, payload)


@router.delete("/remove/{item_id}", response_model=CartResponse)
def remove_from_cart(item_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return CartService.remove_item(db, user.id, item_id)
