# app/routers/purchase.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_student
from app.models.user import User
from app.schemas.common import APIResponse, MessageResponse
from app.schemas.purchase import (
    CreateOrderRequest,
    CreateOrderResponse,
    SaleHistoryItem,
    VerifyPaymentRequest,
)
from app.services.payment_gateway import PaymentGateway, get_payment_gateway
from app.services.purchase import PurchaseService

router = APIRouter(
    prefix="/student/purchase",
    tags=["Purchases"],
    responses={404: {"description": "Not found"}},
)


@router.post("/initiate", response_model=APIResponse[CreateOrderResponse])
def create_order(
    order_in: CreateOrderRequest,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    current_user: User = Depends(get_current_student),
):
    """
    Create a Pending order for a course.
    Returns what the client needs to hand off to the payment gateway.
    """
    service = PurchaseService(db, gateway)
    order = service.create_order(current_user.id, order_in)
    return {
        "message": "Order created successfully. Proceed to payment.",
        "data": order,
    }


@router.post("/verify", response_model=MessageResponse)
def verify_payment(
    verify_in: VerifyPaymentRequest,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    current_user: User = Depends(get_current_student),
):
    """
    Verify the gateway signature and settle the order.
    On success the student is enrolled in the course.
    """
    service = PurchaseService(db, gateway)
    service.verify_payment(current_user.id, verify_in)
    return {"message": "Payment successful. You are now enrolled in the course."}


@router.get("/history", response_model=APIResponse[List[SaleHistoryItem]])
def get_sales_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_student),
):
    """Get the current student's purchase attempts, newest first"""
    service = PurchaseService(db)
    return {
        "message": "Successfully fetched sales history.",
        "data": service.get_sales_history(current_user.id),
    }
