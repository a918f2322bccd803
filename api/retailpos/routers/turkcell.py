from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from retailpos.db.session import get_db
from retailpos.models import User
from retailpos.schemas.turkcell import (
    TurkcellDailyResponse,
    TurkcellProgressResponse,
    TurkcellTargetRequest,
    TurkcellTransactionRequest,
)
from retailpos.services import turkcell
from retailpos.services.deps import get_current_user, require_roles

router = APIRouter(prefix="/turkcell", tags=["turkcell"])


@router.post("/transactions", response_model=TurkcellDailyResponse, status_code=201)
def add_transaction(
    payload: TurkcellTransactionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    transaction = turkcell.record_transaction(
        db,
        user,
        payload.transaction_type,
        payload.count,
        transaction_date=payload.transaction_date,
        description=payload.description,
        reference_number=payload.reference_number,
    )
    day = transaction.transaction_date
    return {"date": day, "total": turkcell.daily_total(db, user, day)}


@router.get("/daily", response_model=TurkcellDailyResponse)
def daily(
    day: date | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    day = day or date.today()
    return {"date": day, "total": turkcell.daily_total(db, user, day)}


@router.put("/target", response_model=TurkcellProgressResponse)
def set_target(
    payload: TurkcellTargetRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles("admin", "manager")),
):
    target = turkcell.set_monthly_target(db, user, payload.target_count, payload.month)
    return turkcell.monthly_progress(db, user, target.target_month)


@router.get("/progress", response_model=TurkcellProgressResponse)
def progress(
    month: date | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return turkcell.monthly_progress(db, user, month)
