from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from retailpos.db.session import get_db
from retailpos.models import Personnel, User
from retailpos.schemas.personnel import (
    LedgerSummaryResponse,
    PersonnelCreateRequest,
    PersonnelResponse,
    PersonnelUpdateRequest,
    TransactionCreateRequest,
    TransactionResponse,
)
from retailpos.services import personnel_ledger
from retailpos.services.deps import require_roles

router = APIRouter(prefix="/personnel", tags=["personnel"])

managers_only = require_roles("admin", "manager")


def get_personnel_or_404(db: Session, branch_id: int, personnel_id: int) -> Personnel:
    person = db.get(Personnel, personnel_id)
    if not person or person.branch_id != branch_id:
        raise HTTPException(status_code=404, detail="Personel bulunamadı")
    return person


@router.post("", response_model=PersonnelResponse, status_code=201)
def create_personnel(
    payload: PersonnelCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(managers_only),
):
    if not user.branch_id:
        raise HTTPException(status_code=400, detail="Kullanıcı şubesi bulunamadı")
    person = Personnel(branch_id=user.branch_id, **payload.model_dump())
    db.add(person)
    db.commit()
    return person


@router.get("", response_model=list[PersonnelResponse])
def list_personnel(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    user: User = Depends(managers_only),
):
    stmt = select(Personnel).where(Personnel.branch_id == user.branch_id)
    if not include_inactive:
        stmt = stmt.where(Personnel.is_active.is_(True))
    return db.execute(stmt.order_by(Personnel.full_name.asc())).scalars().all()


@router.get("/{personnel_id}", response_model=PersonnelResponse)
def get_personnel(
    personnel_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(managers_only),
):
    return get_personnel_or_404(db, user.branch_id, personnel_id)


@router.patch("/{personnel_id}", response_model=PersonnelResponse)
def update_personnel(
    personnel_id: int,
    payload: PersonnelUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(managers_only),
):
    person = get_personnel_or_404(db, user.branch_id, personnel_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(person, key, value)
    db.commit()
    return person


@router.post("/{personnel_id}/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    personnel_id: int,
    payload: TransactionCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(managers_only),
):
    return personnel_ledger.create_transaction(
        db,
        user,
        personnel_id,
        payload.transaction_type,
        payload.amount,
        payload.description,
        transaction_date=payload.transaction_date,
        payment_type=payload.payment_type,
        notes=payload.notes,
    )


@router.get("/{personnel_id}/transactions", response_model=list[TransactionResponse])
def list_transactions(
    personnel_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(managers_only),
):
    get_personnel_or_404(db, user.branch_id, personnel_id)
    transactions = personnel_ledger.list_transactions(db, personnel_id)

    result = []
    for transaction, balance in personnel_ledger.running_balances(transactions):
        response = TransactionResponse.model_validate(transaction)
        response.balance = float(balance)
        result.append(response)
    return result


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(managers_only),
):
    personnel_ledger.delete_transaction(db, user.branch_id, transaction_id)


@router.get("/{personnel_id}/summary", response_model=LedgerSummaryResponse)
def ledger_summary(
    personnel_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(managers_only),
):
    get_personnel_or_404(db, user.branch_id, personnel_id)
    summary = personnel_ledger.summarize(personnel_ledger.list_transactions(db, personnel_id))
    return LedgerSummaryResponse(
        total_credit=float(summary.total_credit),
        total_debit=float(summary.total_debit),
        balance=float(summary.balance),
        total_advances=float(summary.total_advances),
        total_deductions=float(summary.total_deductions),
        remaining_advance=float(summary.remaining_advance),
    )
