
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.errors import NotFoundError
from app.models.cart import Cart, CartItem
from app.schemas.cart import CartItemRequest
from app.services.product_service import ProductService


class CartService:

    @staticmethod
    def get_cart(db: Session, user_id: int) -> Optional[Cart]:
        return db.query(Cart).filter(Cart.user_id == user_id).first()

    @staticmethod
    def add_item(db: Session, user_id: int, data: CartItemRequest) -> Cart:
        ProductService.get_product(db, data.product_id)
        cart = CartService.get_cart(db, user_id)
        if cart is None:
            cart = Cart(user_id=user_id)
            db.add(cart)

        existing = next(
            (it for it in cart.items if it.product_id == data.product_id and it.size == data.size),
            None,
        )
        if existing:
            existing.quantity += data.quantity
        else:
            cart.items.append(CartItem(product_id=data.product_id, quantity=data.quantity, size=data.size))
        db.commit()
        db.refresh(cart)
        return cart

    @staticmethod
    def update_item(db: Session, user_id: int, data: CartItemRequest) -> Cart:
        cart = CartService.get_cart(db, user_id)
        if cart is None:
            raise NotFoundError("Cart")
        item = next(
            (it for it in cart.items if it.product_id == data.product_id and it.size == data.size),
            None,
        )
        if item is None:
            raise NotFoundError("Cart item")
        item.quantity = data.quantity
        db.commit()
        db.refresh(cart)
        return cart

    @staticmethod
    def remove_item(db: Session, user_id: int, item_id: int) -> Cart:
        cart = CartService.get_cart(db, user_id)
        if cart is None:
            raise NotFoundError("Cart")
        cart.items = [it for it in cart.items if it.id != item_id]
        db.commit()
        db.refresh(cart)
        return cart

    @staticmethod
    def clear(db: Session, user_id: int) -> None:
        db.query(CartItem).filter(
            CartItem.cart_id.in_(select(Cart.id).where(Cart.user_id == user_id))
        ).delete(synchronize_session=False)
        db.query(Cart).filter(Cart.user_id == user_id).delete(synchronize_session=False)
        db.commit()
