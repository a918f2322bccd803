"""Turkcell operator KPIs: daily transaction counts against a monthly target."""
import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.models import TurkcellTarget, TurkcellTransaction, User

logger = logging.getLogger(__name__)


def month_start(day: date) -> date:
    return day.replace(day=1)


def next_month(day: date) -> date:
    first = month_start(day)
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def _branch_of(user: User) -> int:
    if not user.branch_id:
        raise AppException(ErrorType.VALIDATION, "Kullanıcı branch bilgisi bulunamadı")
    return user.branch_id


def record_transaction(
    db: Session,
    user: User,
    transaction_type: str,
    count: int = 1,
    *,
    transaction_date: date | None = None,
    description: str | None = None,
    reference_number: str | None = None,
) -> TurkcellTransaction:
    if count <= 0:
        raise AppException(ErrorType.VALIDATION, "İşlem adedi sıfırdan büyük olmalıdır")

    transaction = TurkcellTransaction(
        branch_id=_branch_of(user),
        user_id=user.id,
        transaction_date=transaction_date or date.today(),
        transaction_type=transaction_type,
        count=count,
        description=description,
        reference_number=reference_number,
    )
    db.add(transaction)
    db.commit()
    return transaction


def _count_between(db: Session, branch_id: int, start: date, end_exclusive: date) -> int:
    return db.execute(
        select(func.coalesce(func.sum(TurkcellTransaction.count), 0)).where(
            TurkcellTransaction.branch_id == branch_id,
            TurkcellTransaction.transaction_date >= start,
            TurkcellTransaction.transaction_date < end_exclusive,
        )
    ).scalar_one()


def daily_total(db: Session, user: User, day: date | None = None) -> int:
    day = day or date.today()
    return db.execute(
        select(func.coalesce(func.sum(TurkcellTransaction.count), 0)).where(
            TurkcellTransaction.branch_id == _branch_of(user),
            TurkcellTransaction.transaction_date == day,
        )
    ).scalar_one()


def get_monthly_target(db: Session, user: User, month: date | None = None) -> int:
    target = db.execute(
        select(TurkcellTarget.target_count).where(
            TurkcellTarget.branch_id == _branch_of(user),
            TurkcellTarget.target_month == month_start(month or date.today()),
        )
    ).scalar_one_or_none()
    return target or 0


def set_monthly_target(db: Session, user: User, target_count: int, month: date | None = None) -> TurkcellTarget:
    if target_count <= 0:
        raise AppException(ErrorType.VALIDATION, "Hedef değeri 0'dan büyük bir sayı olmalıdır")

    branch_id = _branch_of(user)
    target_month = month_start(month or date.today())
    target = db.execute(
        select(TurkcellTarget).where(
            TurkcellTarget.branch_id == branch_id,
            TurkcellTarget.target_month == target_month,
        )
    ).scalar_one_or_none()

    if target is None:
        target = TurkcellTarget(branch_id=branch_id, target_month=target_month)
        db.add(target)
    target.target_count = target_count
    target.user_id = user.id
    db.commit()

    logger.info(f"Turkcell target for branch {branch_id}, {target_month:%Y-%m} set to {target_count}")
    return target


def monthly_progress(db: Session, user: User, month: date | None = None) -> dict:
    month = month_start(month or date.today())
    total = _count_between(db, _branch_of(user), month, next_month(month))
    target = get_monthly_target(db, user, month)

    progress = Decimal("0")
    if target:
        progress = (Decimal(total) * 100 / Decimal(target)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return {"month": month, "total": total, "target": target, "progress": progress}
