from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from retailpos.db.session import get_db
from retailpos.models import CashMovement, User
from retailpos.schemas.cash import (
    CashEntryRequest,
    CashMovementResponse,
    DailyCashSummaryResponse,
    DrawerRequest,
)
from retailpos.services import cash_drawer
from retailpos.services.cash_drawer import DailyCashSummary
from retailpos.services.deps import get_current_user

router = APIRouter(prefix="/cash", tags=["cash"])


def summary_response(day: date, summary: DailyCashSummary) -> DailyCashSummaryResponse:
    return DailyCashSummaryResponse(
        date=day,
        opening_amount=float(summary.opening_amount),
        closing_amount=float(summary.closing_amount),
        total_sales=float(summary.total_sales),
        total_card_sales=float(summary.total_card_sales),
        total_income=float(summary.total_income),
        total_expense=float(summary.total_expense),
        expected_cash=float(summary.expected_cash),
        cash_difference=float(summary.cash_difference),
        movement_count=summary.movement_count,
        is_open=summary.is_open,
        is_closed=summary.is_closed,
    )


def movement_response(movement: CashMovement) -> CashMovementResponse:
    response = CashMovementResponse.model_validate(movement)
    if movement.sale is not None:
        response.sale_number = movement.sale.sale_number
    return response


@router.get("/status", response_model=DailyCashSummaryResponse)
def cash_status(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    today = date.today()
    return summary_response(today, cash_drawer.daily_summary(db, user.branch_id, today))


@router.get("/summary", response_model=DailyCashSummaryResponse)
def cash_summary(
    day: date | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    day = day or date.today()
    return summary_response(day, cash_drawer.daily_summary(db, user.branch_id, day))


@router.post("/open", response_model=CashMovementResponse, status_code=201)
def open_cash(
    payload: DrawerRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return movement_response(cash_drawer.open_drawer(db, user, payload.amount, payload.description))


@router.post("/close", response_model=DailyCashSummaryResponse)
def close_cash(
    payload: DrawerRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    today = date.today()
    summary = cash_drawer.close_drawer(db, user, payload.amount, payload.description, today)
    return summary_response(today, summary)


@router.post("/income", response_model=CashMovementResponse, status_code=201)
def add_income(
    payload: CashEntryRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    movement = cash_drawer.add_income(db, user, payload.amount, payload.description, payload.reference_number)
    return movement_response(movement)


@router.post("/expense", response_model=CashMovementResponse, status_code=201)
def add_expense(
    payload: CashEntryRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    movement = cash_drawer.add_expense(db, user, payload.amount, payload.description, payload.reference_number)
    return movement_response(movement)


@router.get("/movements", response_model=list[CashMovementResponse])
def list_movements(
    start: date | None = None,
    end: date | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    start = start or date.today()
    end = end or start
    return [movement_response(m) for m in cash_drawer.movements_between(db, user.branch_id, start, end)]
