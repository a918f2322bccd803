"""Daily cash drawer: opening, closing, income/expense and reconciliation.

Movements are append-only. The daily summary is always derived from the rows
of that day and does not depend on the order they are read in.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException, from_integrity_error
from retailpos.models import CashMovement, User
from retailpos.services.vat import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

MOVEMENT_LABELS = {
    "income": "Gelir",
    "expense": "Gider",
    "sale": "Satış",
    "opening": "Açılış",
    "closing": "Kapanış",
}


def drawer_guard(branch_id: int, movement_date: date, movement_type: str) -> str | None:
    """Unique key that allows one opening and one closing per branch and day."""
    if movement_type not in ("opening", "closing"):
        return None
    return f"{branch_id}:{movement_date.isoformat()}:{movement_type}"


def record_movement(
    db: Session,
    *,
    branch_id: int,
    user_id: int | None,
    movement_type: str,
    amount,
    movement_date: date,
    payment_method: str = "cash",
    description: str | None = None,
    reference_number: str | None = None,
    sale_id: int | None = None,
    customer_payment_id: int | None = None,
) -> CashMovement:
    """Add a movement to the session without committing."""
    if movement_type not in MOVEMENT_LABELS:
        raise AppException(ErrorType.VALIDATION, "Geçersiz kasa hareketi")

    movement = CashMovement(
        branch_id=branch_id,
        user_id=user_id,
        sale_id=sale_id,
        customer_payment_id=customer_payment_id,
        movement_type=movement_type,
        payment_method=payment_method,
        amount=to_money(amount),
        description=description,
        reference_number=reference_number,
        movement_date=movement_date,
        drawer_guard=drawer_guard(branch_id, movement_date, movement_type),
    )
    db.add(movement)
    db.flush()
    return movement


@dataclass(frozen=True)
class DailyCashSummary:
    opening_amount: Decimal = ZERO
    closing_amount: Decimal = ZERO
    total_sales: Decimal = ZERO
    total_card_sales: Decimal = ZERO
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    movement_count: int = 0
    is_open: bool = False
    is_closed: bool = False

    @property
    def expected_cash(self) -> Decimal:
        return self.opening_amount + self.total_sales + self.total_income - self.total_expense

    @property
    def cash_difference(self) -> Decimal:
        """Counted minus expected: negative when the drawer is short."""
        return self.closing_amount - self.expected_cash


def summarize_movements(movements) -> DailyCashSummary:
    """Reduce a day's movements into drawer buckets.

    Every sale counts toward the expected cash. Non-cash sales are also
    reported on their own as a breakdown.
    """
    movements = list(movements)
    buckets = {
        "opening": ZERO,
        "closing": ZERO,
        "sale": ZERO,
        "card": ZERO,
        "income": ZERO,
        "expense": ZERO,
    }
    count = 0
    for movement in movements:
        amount = to_money(movement.amount)
        buckets[movement.movement_type] += amount
        if movement.movement_type == "sale" and movement.payment_method != "cash":
            buckets["card"] += amount
        count += 1

    seen = {movement.movement_type for movement in movements}
    return DailyCashSummary(
        opening_amount=buckets["opening"],
        closing_amount=buckets["closing"],
        total_sales=buckets["sale"],
        total_card_sales=buckets["card"],
        total_income=buckets["income"],
        total_expense=buckets["expense"],
        movement_count=count,
        is_open="opening" in seen and "closing" not in seen,
        is_closed="closing" in seen,
    )


def movements_between(db: Session, branch_id: int, start: date, end: date) -> list[CashMovement]:
    return list(
        db.execute(
            select(CashMovement)
            .options(joinedload(CashMovement.sale))
            .where(
                CashMovement.branch_id == branch_id,
                CashMovement.movement_date >= start,
                CashMovement.movement_date <= end,
            )
            .order_by(CashMovement.movement_date.desc(), CashMovement.id.desc())
        ).scalars()
    )


def daily_summary(db: Session, branch_id: int, on_date: date | None = None) -> DailyCashSummary:
    on_date = on_date or date.today()
    return summarize_movements(movements_between(db, branch_id, on_date, on_date))


def _has_movement(db: Session, branch_id: int, movement_type: str, on_date: date) -> bool:
    return db.execute(
        select(CashMovement.id)
        .where(
            CashMovement.branch_id == branch_id,
            CashMovement.movement_type == movement_type,
            CashMovement.movement_date == on_date,
        )
        .limit(1)
    ).first() is not None


def _branch_of(user: User) -> int:
    if not user.branch_id:
        raise AppException(ErrorType.VALIDATION, "Kullanıcı şubesi bulunamadı")
    return user.branch_id


def _commit_movement(db: Session, **values) -> CashMovement:
    try:
        movement = record_movement(db, **values)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        app_exc = from_integrity_error(exc)
        if app_exc.error_type is ErrorType.CONFLICT:
            raise AppException(ErrorType.CONFLICT, "Bu gün için kasa kaydı zaten mevcut")
        raise app_exc
    except AppException:
        db.rollback()
        raise
    return movement


def open_drawer(db: Session, user: User, amount, description: str | None = None, on_date: date | None = None) -> CashMovement:
    branch_id = _branch_of(user)
    on_date = on_date or date.today()
    if to_money(amount) < ZERO:
        raise AppException(ErrorType.VALIDATION, "Tutar negatif olamaz")
    if _has_movement(db, branch_id, "opening", on_date):
        raise AppException(ErrorType.CONFLICT, "Kasa bugün zaten açılmış")

    movement = _commit_movement(
        db,
        branch_id=branch_id,
        user_id=user.id,
        movement_type="opening",
        amount=amount,
        movement_date=on_date,
        description=description or "Günlük kasa açılışı",
    )
    logger.info(f"Cash drawer opened for branch {branch_id} on {on_date} with {movement.amount}")
    return movement


def close_drawer(db: Session, user: User, amount, description: str | None = None, on_date: date | None = None) -> DailyCashSummary:
    branch_id = _branch_of(user)
    on_date = on_date or date.today()
    if to_money(amount) < ZERO:
        raise AppException(ErrorType.VALIDATION, "Tutar negatif olamaz")
    if not _has_movement(db, branch_id, "opening", on_date):
        raise AppException(ErrorType.VALIDATION, "Kasa açılmadan kapanış yapılamaz")
    if _has_movement(db, branch_id, "closing", on_date):
        raise AppException(ErrorType.CONFLICT, "Kasa bugün zaten kapatılmış")

    _commit_movement(
        db,
        branch_id=branch_id,
        user_id=user.id,
        movement_type="closing",
        amount=amount,
        movement_date=on_date,
        description=description or "Günlük kasa kapanışı",
    )
    summary = daily_summary(db, branch_id, on_date)
    log = logger.warning if summary.cash_difference != ZERO else logger.info
    log(
        f"Cash drawer closed for branch {branch_id} on {on_date}: "
        f"expected {summary.expected_cash}, counted {summary.closing_amount}, difference {summary.cash_difference}"
    )
    return summary


def add_income(db: Session, user: User, amount, description: str, reference_number: str | None = None,
               on_date: date | None = None) -> CashMovement:
    return _add_entry(db, user, "income", amount, description, reference_number, on_date)


def add_expense(db: Session, user: User, amount, description: str, reference_number: str | None = None,
                on_date: date | None = None) -> CashMovement:
    return _add_entry(db, user, "expense", amount, description, reference_number, on_date)


def _add_entry(db, user, movement_type, amount, description, reference_number, on_date) -> CashMovement:
    if to_money(amount) <= ZERO:
        raise AppException(ErrorType.VALIDATION, "Tutar sıfırdan büyük olmalıdır")
    movement = _commit_movement(
        db,
        branch_id=_branch_of(user),
        user_id=user.id,
        movement_type=movement_type,
        amount=amount,
        movement_date=on_date or date.today(),
        description=description,
        reference_number=reference_number,
    )
    logger.info(f"Recorded {movement_type} of {movement.amount} for branch {movement.branch_id}")
    return movement
