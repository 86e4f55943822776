
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.auth import get_current_user, require_admin
from app.database import get_db
from app.errors import InvalidCoupon, NotFoundError
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.coupon import (
    CouponCreate, CouponUpdate, CouponResponse, PublicCouponResponse,
    CouponValidateRequest, CouponValidateResponse,
)
from app.services.coupon_service import CouponService
from app.services.discount_calculator import DiscountCalculator, D

router = APIRouter(prefix="/api/coupons", tags=["coupons"])


@router.get("/active", response_model=List[PublicCouponResponse])
def list_active_coupons(db: Session = Depends(get_db)):
    return CouponService.get_active_coupons(db)


@router.get("/admin/all", response_model=List[CouponResponse])
def list_coupons(skip: int = 0, limit: int = 100, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return CouponService.get_coupons(db, skip, limit)


@router.post("/validate", response_model=CouponValidateResponse)
def validate_coupon(body: CouponValidateRequest, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    coupon = CouponService.get_by_code(db, body.code)
    if not coupon:
        raise NotFoundError("Coupon")
    discount = DiscountCalculator.calculate_discount(coupon, body.order_amount)
    return CouponValidateResponse(
        valid=True,
        code=coupon.code,
        description=coupon.description,
        discount=float(discount),
        final_amount=float(D(body.order_amount) - discount),
    )


@router.get("/{code}", response_model=PublicCouponResponse)
def get_coupon_by_code(code: str, db: Session = Depends(get_db)):
    coupon = CouponService.get_by_code(db, code)
    if not coupon:
        raise NotFoundError("Coupon")
    if not DiscountCalculator.is_valid(coupon):
        raise InvalidCoupon("Coupon is not valid or has expired")
    return coupon


@router.post("", response_model=CouponResponse, status_code=201)
def create_coupon(coupon: CouponCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return CouponService.create_coupon(db, coupon, created_by=admin.id)


@router.put("/{coupon_id}", response_model=CouponResponse)
def update_coupon(coupon_id: int, payload: CouponUpdate, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return CouponService.update_coupon(db, coupon_id, payload)


@router.delete("/{coupon_id}", response_model=MessageResponse)
def delete_coupon(coupon_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    CouponService.deactivate_coupon(db, coupon_id)
    return {"message": "Coupon deactivated successfully"}
