# app/schemas/sales.py
import datetime

from app.models.sale import SaleStatus
from app.schemas.common import CamelModel, Money


class SaleUser(CamelModel):
    id: int
    name: str


class SaleCourse(CamelModel):
    id: int
    title: str


class SaleResponse(CamelModel):
    id: int
    original_amount: Money
    discount_amount: Money
    amount: Money
    status: str
    date: datetime.date
    user: SaleUser
    course: SaleCourse


class SaleStatusUpdate(CamelModel):
    status: SaleStatus


class SalesAnalytics(CamelModel):
    total_revenue: Money
    total_sales: int
