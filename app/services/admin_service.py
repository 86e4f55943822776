
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.order import Order
from app.models.product import Product
from app.models.user import User


class AdminService:

    @staticmethod
    def dashboard_stats(db: Session) -> dict:
        total_revenue = (
            db.query(func.coalesce(func.sum(Order.total_amount), 0))
            .filter(Order.payment_status == "Paid")
            .scalar()
        )
        orders_by_status = (
            db.query(Order.status, func.count(Order.id))
            .group_by(Order.status)
            .all()
        )
        return {
            "total_users": db.query(func.count(User.id)).filter(User.role == "user").scalar(),
            "total_orders": db.query(func.count(Order.id)).scalar(),
            "total_products": db.query(func.count(Product.id)).scalar(),
            "total_revenue": float(total_revenue or 0),
            "orders_by_status": {status: count for status, count in orders_by_status},
        }
