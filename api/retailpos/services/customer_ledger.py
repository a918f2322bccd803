"""Customer running balances: credit sales raise them, payments lower them.

Balance changes are single-statement updates so two cashiers working on the
same customer cannot overwrite each other's change.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import and_, case, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from retailpos.core.config import settings
from retailpos.errors import ErrorType
from retailpos.exceptions import AppException, from_integrity_error
from retailpos.models import CashMovement, Customer, CustomerPayment, Sale, User
from retailpos.services.cash_drawer import record_movement
from retailpos.services.numbering import next_document_number
from retailpos.services.vat import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
PAYMENT_METHODS = ("cash", "pos", "bank")


def add_to_balance(
    db: Session,
    customer_id: int,
    amount,
    *,
    enforce_credit_limit: bool = False,
    only_active: bool = True,
) -> Decimal:
    """Raise the balance by ``amount``.

    Sales only charge active customers. Reversals pass ``only_active=False``
    so a deactivated customer's balance can still be restored.
    """
    amount = to_money(amount)
    stmt = update(Customer).where(Customer.id == customer_id)
    if only_active:
        stmt = stmt.where(Customer.is_active.is_(True))
    if enforce_credit_limit:
        stmt = stmt.where(
            or_(Customer.credit_limit <= 0, Customer.current_balance + amount <= Customer.credit_limit)
        )

    new_balance = db.execute(
        stmt.values(current_balance=Customer.current_balance + amount, updated_at=func.now())
        .returning(Customer.current_balance)
    ).scalar_one_or_none()
    if new_balance is not None:
        return to_money(new_balance)

    customer = db.get(Customer, customer_id)
    if customer is None or (only_active and not customer.is_active):
        raise AppException(ErrorType.NOT_FOUND, "Müşteri bulunamadı")
    raise AppException(
        ErrorType.CREDIT_LIMIT,
        f"{customer.name} için kredi limiti aşılıyor. Limit: {to_money(customer.credit_limit)}",
    )


def subtract_from_balance(db: Session, customer_id: int, amount) -> Decimal:
    """Lower the balance by ``amount``, never below zero."""
    amount = to_money(amount)
    new_balance = db.execute(
        update(Customer)
        .where(Customer.id == customer_id)
        .values(
            current_balance=case(
                (Customer.current_balance > amount, Customer.current_balance - amount),
                else_=0,
            ),
            updated_at=func.now(),
        )
        .returning(Customer.current_balance)
    ).scalar_one_or_none()
    if new_balance is None:
        raise AppException(ErrorType.NOT_FOUND, "Müşteri bulunamadı")
    return to_money(new_balance)


def record_payment(
    db: Session,
    user: User,
    customer_id: int,
    amount,
    *,
    payment_method: str = "cash",
    description: str | None = None,
    payment_date: date | None = None,
) -> CustomerPayment:
    amount = to_money(amount)
    if amount <= ZERO:
        raise AppException(ErrorType.VALIDATION, "Tutar sıfırdan büyük olmalıdır")
    if payment_method not in PAYMENT_METHODS:
        raise AppException(ErrorType.VALIDATION, "Geçersiz ödeme yöntemi")
    if not user.branch_id:
        raise AppException(ErrorType.VALIDATION, "Kullanıcı şubesi bulunamadı")

    payment_date = payment_date or date.today()
    try:
        number = next_document_number(db, CustomerPayment.payment_number, "TAH", payment_date)
        payment = CustomerPayment(
            payment_number=number,
            customer_id=customer_id,
            branch_id=user.branch_id,
            user_id=user.id,
            amount=amount,
            payment_method=payment_method,
            payment_date=payment_date,
            description=description,
        )
        db.add(payment)
        subtract_from_balance(db, customer_id, amount)
        db.flush()

        if payment_method == "cash":
            record_movement(
                db,
                branch_id=user.branch_id,
                user_id=user.id,
                movement_type="income",
                amount=amount,
                description=f"Tahsilat - {number}",
                reference_number=number,
                movement_date=payment_date,
                customer_payment_id=payment.id,
            )

        db.commit()
    except AppException:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        raise from_integrity_error(exc)

    logger.info(f"Recorded payment {number} of {amount} from customer {customer_id}")
    return payment


def delete_payment(db: Session, payment_id: int) -> None:
    """Remove a payment and give its amount back to the customer's balance."""
    payment = db.get(CustomerPayment, payment_id)
    if payment is None:
        raise AppException(ErrorType.NOT_FOUND, "Ödeme bulunamadı")

    try:
        db.execute(delete(CashMovement).where(CashMovement.customer_payment_id == payment.id))
        add_to_balance(db, payment.customer_id, payment.amount, only_active=False)
        db.delete(payment)
        db.commit()
    except AppException:
        db.rollback()
        raise

    logger.info(f"Deleted payment {payment.payment_number}, balance restored by {payment.amount}")


def payment_history(db: Session, customer_id: int) -> list[CustomerPayment]:
    return list(
        db.execute(
            select(CustomerPayment)
            .where(CustomerPayment.customer_id == customer_id)
            .order_by(CustomerPayment.payment_date.desc(), CustomerPayment.id.desc())
        ).scalars()
    )


@dataclass(frozen=True)
class OverdueSale:
    sale: Sale
    customer: Customer
    days_past_due: int
    overdue_amount: Decimal


def overdue_sales(db: Session, today: date | None = None) -> list[OverdueSale]:
    """Credit sales whose due date has passed, or older than the payment term when undated."""
    today = today or date.today()
    term_start = today - timedelta(days=settings.overdue_days)
    rows = db.execute(
        select(Sale, Customer)
        .join(Customer, Customer.id == Sale.customer_id)
        .where(
            Sale.credit_amount > 0,
            Sale.status == "pending",
            or_(
                Sale.due_date < today,
                and_(Sale.due_date.is_(None), Sale.sale_date < term_start),
            ),
        )
    ).all()

    result = []
    for sale, customer in rows:
        reference = sale.due_date or sale.sale_date + timedelta(days=settings.overdue_days)
        result.append(
            OverdueSale(
                sale=sale,
                customer=customer,
                days_past_due=(today - reference).days,
                overdue_amount=to_money(sale.credit_amount),
            )
        )
    return sorted(result, key=lambda item: item.days_past_due, reverse=True)


def customers_near_credit_limit(db: Session, threshold: Decimal | None = None) -> list[Customer]:
    threshold = settings.credit_limit_warning_ratio if threshold is None else Decimal(str(threshold))
    customers = db.execute(
        select(Customer).where(Customer.credit_limit > 0, Customer.is_active.is_(True))
    ).scalars()
    return [
        customer
        for customer in customers
        if Decimal(str(customer.current_balance)) / Decimal(str(customer.credit_limit)) >= threshold
    ]


def balance_report(db: Session, today: date | None = None) -> dict:
    debtors = list(
        db.execute(
            select(Customer)
            .where(Customer.is_active.is_(True), Customer.current_balance > 0)
            .order_by(Customer.current_balance.desc())
        ).scalars()
    )
    total_customers = db.execute(
        select(func.count(Customer.id)).where(Customer.is_active.is_(True))
    ).scalar_one()
    overdue = overdue_sales(db, today)

    total_outstanding = sum((to_money(c.current_balance) for c in debtors), ZERO)
    return {
        "total_outstanding": total_outstanding,
        "total_overdue": sum((item.overdue_amount for item in overdue), ZERO),
        "customers_with_debt": len(debtors),
        "total_customers": total_customers,
        "average_debt": to_money(total_outstanding / len(debtors)) if debtors else ZERO,
        "debtors": debtors,
        "overdue": overdue,
        "near_credit_limit": customers_near_credit_limit(db),
    }
