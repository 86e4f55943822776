
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from app.errors import NotFoundError, ValidationError, OutOfStockError
from app.models.product import Product, ProductReview
from app.models.user import User
from app.schemas.product import ProductCreate, ProductUpdate, ReviewCreate

logger = logging.getLogger(__name__)


class ProductService:
    """Catalog CRUD plus the atomic stock counter operations checkout relies on"""

    @staticmethod
    def create_product(db: Session, data: ProductCreate) -> Product:
        product = Product(**data.model_dump())
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def get_product(db: Session, product_id: int) -> Product:
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    @staticmethod
    def list_products(
        db: Session,
        category: Optional[str] = None,
        size: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
    ) -> List[Product]:
        q = db.query(Product)
        if category:
            q = q.filter(Product.category == category)
        if min_price is not None:
            q = q.filter(Product.price >= min_price)
        if max_price is not None:
            q = q.filter(Product.price <= max_price)
        if search:
            q = q.filter(Product.name.ilike(f"%{search}%"))
        products = q.order_by(Product.created_at.desc(), Product.id.desc()).all()
        # sizes is a JSON list; filter portably in Python
        if size:
            products = [p for p in products if size in (p.sizes or [])]
        return products

    @staticmethod
    def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
        product = ProductService.get_product(db, product_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(product, key, value)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def delete_product(db: Session, product_id: int) -> None:
        product = ProductService.get_product(db, product_id)
        db.delete(product)
        db.commit()

    @staticmethod
    def add_review(db: Session, product_id: int, user: User, data: ReviewCreate) -> Product:
        product = ProductService.get_product(db, product_id)
        if any(r.user_id == user.id for r in product.reviews):
            raise ValidationError("Product already reviewed")
        product.reviews.append(ProductReview(
            user_id=user.id,
            name=user.name,
            rating=data.rating,
            comment=data.comment,
        ))
        product.calculate_rating()
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def similar_products(db: Session, product_id: int, limit: int = 8) -> List[Product]:
        product = ProductService.get_product(db, product_id)
        return (
            db.query(Product)
            .filter(Product.category == product.category, Product.id != product.id, Product.is_active == True)
            .limit(limit)
            .all()
        )

    @staticmethod
    def decrement_stock(db: Session, product_id: int, quantity: int, name: Optional[str] = None) -> None:
        """Take ``quantity`` units or fail without touching the counter. Caller commits."""
        updated = (
            db.query(Product)
            .filter(Product.id == product_id, Product.stock >= quantity)
            .update({Product.stock: Product.stock - quantity}, synchronize_session=False)
        )
        if not updated:
            raise OutOfStockError(name or f"product {product_id}", quantity)

    @staticmethod
    def increment_stock(db: Session, product_id: int, quantity: int) -> bool:
        """Put units back; returns False when the product no longer exists. Caller commits."""
        updated = (
            db.query(Product)
            .filter(Product.id == product_id)
            .update({Product.stock: Product.stock + quantity}, synchronize_session=False)
        )
        if not updated:
            logger.warning("Cannot restore %s units of missing product %s", quantity, product_id)
        return bool(updated)
