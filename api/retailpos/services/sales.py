import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.models import CashMovement, Sale
from retailpos.services.customer_ledger import subtract_from_balance
from retailpos.services.stock import increment_stock
from retailpos.services.vat import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
EDITABLE_FIELDS = ("due_date", "notes")


def get_sale(db: Session, branch_id: int, sale_id: int) -> Sale:
    """Load a sale of ``branch_id``; sales of other branches are not found."""
    sale = db.execute(
        select(Sale)
        .options(selectinload(Sale.items), selectinload(Sale.customer))
        .where(Sale.id == sale_id, Sale.branch_id == branch_id)
    ).scalar_one_or_none()
    if sale is None:
        raise AppException(ErrorType.NOT_FOUND, "Satış bulunamadı")
    return sale


def list_sales(
    db: Session,
    branch_id: int,
    *,
    start: date | None = None,
    end: date | None = None,
    customer_id: int | None = None,
    payment_type: str | None = None,
    status: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Sale]:
    stmt = select(Sale).where(Sale.branch_id == branch_id)
    if start:
        stmt = stmt.where(Sale.sale_date >= start)
    if end:
        stmt = stmt.where(Sale.sale_date <= end)
    if customer_id:
        stmt = stmt.where(Sale.customer_id == customer_id)
    if payment_type:
        stmt = stmt.where(Sale.payment_type == payment_type)
    if status:
        stmt = stmt.where(Sale.status == status)

    stmt = stmt.order_by(Sale.sale_date.desc(), Sale.id.desc()).limit(limit).offset(offset)
    return list(db.execute(stmt).scalars())


def update_sale(db: Session, branch_id: int, sale_id: int, changes: dict) -> Sale:
    """Sales are immutable apart from their due date and notes."""
    illegal = set(changes) - set(EDITABLE_FIELDS)
    if illegal:
        raise AppException(ErrorType.VALIDATION, f"Değiştirilemeyen alanlar: {', '.join(sorted(illegal))}")

    sale = get_sale(db, branch_id, sale_id)
    for key, value in changes.items():
        setattr(sale, key, value)
    db.commit()
    return sale


def delete_sale(db: Session, branch_id: int, sale_id: int) -> None:
    """Remove a sale and reverse what its checkout wrote.

    Stock comes back for every line still linked to a product. The credit
    portion leaves the customer's balance, which never drops below zero.
    The sale's drawer movements are removed with it, all in one transaction.
    """
    sale = get_sale(db, branch_id, sale_id)

    try:
        for item in sale.items:
            if item.product_id is not None:
                increment_stock(db, item.product_id, item.quantity)

        credit = to_money(sale.credit_amount)
        if sale.customer_id is not None and credit > ZERO:
            subtract_from_balance(db, sale.customer_id, credit)

        db.execute(delete(CashMovement).where(CashMovement.sale_id == sale.id))
        db.delete(sale)
        db.commit()
    except AppException as exc:
        db.rollback()
        logger.warning(f"Deleting sale {sale_id} rolled back: {exc.message}")
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Deleting sale {sale_id} failed: {exc}")
        raise AppException(ErrorType.DATABASE, "Satış silinemedi") from exc

    logger.info(f"Deleted sale {sale.sale_number}, stock restored and credit {credit} reversed")


def daily_sales_summary(db: Session, branch_id: int, on_date: date | None = None) -> dict:
    on_date = on_date or date.today()
    row = db.execute(
        select(
            func.count(Sale.id).label("total_sales"),
            func.coalesce(func.sum(Sale.net_amount), 0).label("total_amount"),
            func.coalesce(func.sum(Sale.cash_amount), 0).label("cash_sales"),
            func.coalesce(func.sum(Sale.pos_amount), 0).label("pos_sales"),
            func.coalesce(func.sum(Sale.credit_amount), 0).label("credit_sales"),
        ).where(Sale.branch_id == branch_id, Sale.sale_date == on_date)
    ).one()

    return {
        "date": on_date,
        "total_sales": row.total_sales,
        "total_amount": to_money(row.total_amount),
        "cash_sales": to_money(row.cash_sales),
        "pos_sales": to_money(row.pos_sales),
        "credit_sales": to_money(row.credit_sales),
    }
