
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.errors import ConflictError, NotFoundError, ValidationError, InvalidCoupon
from app.models.coupon import Coupon
from app.schemas.coupon import CouponCreate, CouponUpdate
from app.utils import utcnow, as_utc

logger = logging.getLogger(__name__)


class CouponService:
    """Service class for coupon persistence and usage counting"""

    @staticmethod
    def create_coupon(db: Session, coupon_data: CouponCreate, created_by: Optional[int] = None) -> Coupon:
        code = coupon_data.code.strip().upper()
        if CouponService.get_by_code(db, code):
            raise ConflictError("Coupon code already exists")
        db_coupon = Coupon(
            code=code,
            description=coupon_data.description,
            discount_type=coupon_data.discount_type,
            discount_value=coupon_data.discount_value,
            min_order_value=coupon_data.min_order_value,
            max_discount=coupon_data.max_discount,
            usage_limit=coupon_data.usage_limit,
            used_count=0,
            valid_from=as_utc(coupon_data.valid_from),
            valid_until=as_utc(coupon_data.valid_until),
            is_active=coupon_data.is_active,
            created_by=created_by,
        )
        db.add(db_coupon)
        db.commit()
        db.refresh(db_coupon)
        logger.info("Created coupon %s (%s %s)", code, coupon_data.discount_type, coupon_data.discount_value)
        return db_coupon

    @staticmethod
    def get_coupon(db: Session, coupon_id: int) -> Coupon:
        coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
        if not coupon:
            raise NotFoundError("Coupon")
        return coupon

    @staticmethod
    def get_by_code(db: Session, code: str) -> Optional[Coupon]:
        return db.query(Coupon).filter(Coupon.code == code.strip().upper()).first()

    @staticmethod
    def get_coupons(db: Session, skip: int = 0, limit: int = 100) -> List[Coupon]:
        limit = min(max(limit, 1), 500)
        return db.query(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def get_active_coupons(db: Session, now: Optional[datetime] = None) -> List[Coupon]:
        now = now or utcnow()
        return (
            db.query(Coupon)
            .filter(Coupon.is_active == True, Coupon.valid_from <= now, Coupon.valid_until >= now)
            .order_by(Coupon.valid_until)
            .all()
        )

    @staticmethod
    def update_coupon(db: Session, coupon_id: int, coupon_data: CouponUpdate) -> Coupon:
        db_coupon = CouponService.get_coupon(db, coupon_id)
        changes = coupon_data.model_dump(exclude_unset=True)

        if changes.get("code"):
            changes["code"] = changes["code"].strip().upper()
            existing = CouponService.get_by_code(db, changes["code"])
            if existing and existing.id != db_coupon.id:
                raise ConflictError("Coupon code already exists")

        for key in ("valid_from", "valid_until"):
            if changes.get(key) is not None:
                changes[key] = as_utc(changes[key])

        # Compute final window then validate
        valid_from = changes.get("valid_from") or db_coupon.valid_from
        valid_until = changes.get("valid_until") or db_coupon.valid_until
        if as_utc(valid_until) <= as_utc(valid_from):
            raise ValidationError("valid_until must be after valid_from")

        discount_type = changes.get("discount_type") or db_coupon.discount_type
        discount_value = changes.get("discount_value") or db_coupon.discount_value
        if discount_type == "percentage" and discount_value > 100:
            raise ValidationError("percentage discount cannot exceed 100")

        for key, value in changes.items():
            setattr(db_coupon, key, value)

        db.commit()
        db.refresh(db_coupon)
        return db_coupon

    @staticmethod
    def deactivate_coupon(db: Session, coupon_id: int) -> Coupon:
        # Deactivate instead of delete to keep order history intact
        db_coupon = CouponService.get_coupon(db, coupon_id)
        db_coupon.is_active = False
        db.commit()
        return db_coupon

    @staticmethod
    def consume_usage(db: Session, coupon: Coupon) -> None:
        """Count one use, refusing atomically once the usage limit is reached."""
        updated = (
            db.query(Coupon)
            .filter(
                Coupon.id == coupon.id,
                or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit),
            )
            .update({Coupon.used_count: Coupon.used_count + 1}, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise InvalidCoupon("Coupon usage limit reached")
        db.commit()
        db.refresh(coupon)

    @staticmethod
    def release_usage(db: Session, coupon_id: int) -> None:
        db.query(Coupon).filter(Coupon.id == coupon_id, Coupon.used_count > 0).update(
            {Coupon.used_count: Coupon.used_count - 1}, synchronize_session=False
        )
        db.commit()
