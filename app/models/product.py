
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, Float, JSON, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.database import Base

Sizes = ("S", "M", "L", "XL", "XXL", "Free Size")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(80), nullable=False, index=True)
    brand = Column(String(80), nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    discount_price = Column(Numeric(12, 2), nullable=True)
    sizes = Column(JSON, nullable=False, default=list)
    stock = Column(Integer, nullable=False, default=0)
    colors = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    rating = Column(Float, nullable=False, default=0)
    num_reviews = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    reviews = relationship(
        "ProductReview",
        order_by="ProductReview.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def unit_price(self) -> Decimal:
        """What the catalog charges per unit right now."""
        if self.discount_price is not None and self.discount_price < self.price:
            return Decimal(self.discount_price)
        return Decimal(self.price)

    def calculate_rating(self) -> None:
        if not self.reviews:
            self.rating = 0
            self.num_reviews = 0
        else:
            self.rating = sum(r.rating for r in self.reviews) / len(self.reviews)
            self.num_reviews = len(self.reviews)


class ProductReview(Base):
    __tablename__ = "product_reviews"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(120), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_product_reviews_user"),
    )
