# app/routers/sales.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin
from app.models.user import User
from app.schemas.common import APIResponse
from app.schemas.sales import SaleResponse, SalesAnalytics, SaleStatusUpdate
from app.services.sales import SalesService

router = APIRouter(
    prefix="/sales",
    tags=["Sales"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=APIResponse[List[SaleResponse]])
def list_sales(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    service = SalesService(db)
    return {"message": "Successfully fetched sales.", "data": service.list_sales()}


@router.get("/analytics", response_model=APIResponse[SalesAnalytics])
def get_analytics(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Revenue and count over paid sales"""
    service = SalesService(db)
    return {"message": "Successfully fetched analytics.", "data": service.get_analytics()}


@router.put("/{sale_id}/status", response_model=APIResponse[SaleResponse])
def update_sale_status(
    sale_id: int,
    status_in: SaleStatusUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    service = SalesService(db)
    return {
        "message": f"Sale {sale_id} status updated.",
        "data": service.update_status(sale_id, status_in.status),
    }
