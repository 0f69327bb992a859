# app/services/sales.py
import logging
from decimal import Decimal
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.core.database import transaction
from app.core.exceptions import SaleAlreadySettled, SaleNotFound, SaleStatusNotAllowed
from app.models.sale import Sale, SaleStatus

logger = logging.getLogger(__name__)


def sale_to_response(sale: Sale) -> dict:
    return {
        "id": sale.id,
        "original_amount": sale.original_amount,
        "discount_amount": sale.discount_amount,
        "amount": sale.amount,
        "status": sale.status,
        "date": sale.sale_date.date(),
        "user": {"id": sale.user.id, "name": sale.user.name},
        "course": {"id": sale.course.id, "title": sale.course.title},
    }


class SalesService:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Sale).options(
            joinedload(Sale.user), joinedload(Sale.course)
        )

    def list_sales(self) -> List[dict]:
        sales = self._query().order_by(Sale.sale_date.desc(), Sale.id.desc()).all()
        return [sale_to_response(s) for s in sales]

    def update_status(self, sale_id: int, new_status: SaleStatus) -> dict:
        """
        Manual override by an admin: abandon a Pending sale by marking it
        Failed. Settled sales are final, and Paid is only reachable through
        payment verification, which also enrolls the buyer.
        """
        sale = self.db.query(Sale).filter(Sale.id == sale_id).with_for_update().first()
        if not sale:
            raise SaleNotFound()
        if sale.status != SaleStatus.PENDING.value:
            raise SaleAlreadySettled()
        if new_status != SaleStatus.FAILED:
            raise SaleStatusNotAllowed()

        with transaction(self.db):
            sale.status = new_status.value

        self.db.refresh(sale)
        logger.info(f"Sale {sale_id} marked {sale.status} by an admin")
        return sale_to_response(sale)

    def get_analytics(self) -> dict:
        total_revenue, total_sales = (
            self.db.query(func.sum(Sale.amount), func.count(Sale.id))
            .filter(Sale.status == SaleStatus.PAID.value)
            .one()
        )
        return {
            "total_revenue": total_revenue or Decimal("0.00"),
            "total_sales": total_sales or 0,
        }
