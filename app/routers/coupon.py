# app/routers/coupon.py
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin
from app.models.user import User
from app.schemas.common import APIResponse
from app.schemas.coupon import CouponCreate, CouponResponse, CouponUpdate
from app.services.coupon import CouponService

router = APIRouter(
    prefix="/coupons",
    tags=["Coupons"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=APIResponse[List[CouponResponse]])
def list_coupons(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """List coupons with their usage counts and course restrictions. Admin only."""
    service = CouponService(db)
    return {"message": "Successfully fetched coupons.", "data": service.list_coupons()}


@router.post("/", response_model=APIResponse[CouponResponse], status_code=201)
def create_coupon(
    coupon_in: CouponCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    service = CouponService(db)
    coupon = service.create_coupon(coupon_in)
    return {"message": "Coupon created.", "data": service.to_response(coupon, 0)}


@router.put("/{coupon_id}", response_model=APIResponse[CouponResponse])
def update_coupon(
    coupon_id: int,
    coupon_in: CouponUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    service = CouponService(db)
    coupon = service.update_coupon(coupon_id, coupon_in)
    return {"message": f"Coupon {coupon_id} updated.", "data": service.to_response(coupon)}


@router.delete("/{coupon_id}", status_code=204)
def delete_coupon(
    coupon_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    service = CouponService(db)
    service.delete_coupon(coupon_id)
    return Response(status_code=204)
