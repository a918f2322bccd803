"""Personnel current account.

Each transaction is either a credit to the employee (earned pay) or a debit
(advance, payment, deduction). Balances are recomputed from the rows every
time; nothing is stored.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException, from_integrity_error
from retailpos.models import Personnel, PersonnelTransaction, User
from retailpos.services.numbering import next_document_number
from retailpos.services.vat import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# transaction type -> side of the ledger
TRANSACTION_SIDES = {
    "hakedis": "credit",
    "avans": "debit",
    "odeme": "debit",
    "kesinti": "debit",
}


def split_amount(transaction_type: str, amount) -> tuple[Decimal, Decimal]:
    """Return ``(debit, credit)`` for a transaction of the given type."""
    side = TRANSACTION_SIDES.get(transaction_type)
    if side is None:
        raise AppException(ErrorType.VALIDATION, "Geçersiz işlem türü")
    amount = to_money(amount)
    if amount <= ZERO:
        raise AppException(ErrorType.VALIDATION, "Tutar sıfırdan büyük olmalıdır")
    if side == "debit":
        return amount, ZERO
    return ZERO, amount


def create_transaction(
    db: Session,
    user: User,
    personnel_id: int,
    transaction_type: str,
    amount,
    description: str,
    *,
    transaction_date: date | None = None,
    payment_type: str | None = None,
    notes: str | None = None,
) -> PersonnelTransaction:
    person = db.get(Personnel, personnel_id)
    if person is None or person.branch_id != user.branch_id:
        raise AppException(ErrorType.NOT_FOUND, "Personel bulunamadı")

    debit, credit = split_amount(transaction_type, amount)
    transaction_date = transaction_date or date.today()
    try:
        number = next_document_number(
            db, PersonnelTransaction.transaction_number, transaction_type.upper(), transaction_date
        )
        transaction = PersonnelTransaction(
            transaction_number=number,
            personnel_id=person.id,
            branch_id=person.branch_id,
            user_id=user.id,
            transaction_date=transaction_date,
            transaction_type=transaction_type,
            description=description,
            debit_amount=debit,
            credit_amount=credit,
            payment_type=payment_type,
            notes=notes,
        )
        db.add(transaction)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise from_integrity_error(exc)

    logger.info(f"Personnel transaction {number} recorded for personnel {person.id}")
    return transaction


def delete_transaction(db: Session, branch_id: int, transaction_id: int) -> None:
    transaction = db.get(PersonnelTransaction, transaction_id)
    if transaction is None or transaction.branch_id != branch_id:
        raise AppException(ErrorType.NOT_FOUND, "İşlem bulunamadı")
    db.delete(transaction)
    db.commit()


def list_transactions(db: Session, personnel_id: int) -> list[PersonnelTransaction]:
    return list(
        db.execute(
            select(PersonnelTransaction)
            .where(PersonnelTransaction.personnel_id == personnel_id)
            .order_by(PersonnelTransaction.transaction_date.asc(), PersonnelTransaction.id.asc())
        ).scalars()
    )


def running_balances(transactions) -> list[tuple[PersonnelTransaction, Decimal]]:
    """Pair each transaction with the balance after it, oldest first."""
    ordered = sorted(transactions, key=lambda t: (t.transaction_date, t.id))
    balance = ZERO
    result = []
    for transaction in ordered:
        balance += to_money(transaction.credit_amount) - to_money(transaction.debit_amount)
        result.append((transaction, balance))
    return result


@dataclass(frozen=True)
class LedgerSummary:
    total_credit: Decimal
    total_debit: Decimal
    total_advances: Decimal
    total_deductions: Decimal

    @property
    def balance(self) -> Decimal:
        """Positive when the business owes the employee."""
        return self.total_credit - self.total_debit

    @property
    def remaining_advance(self) -> Decimal:
        return self.total_advances - self.total_deductions


def summarize(transactions) -> LedgerSummary:
    total_credit = total_debit = advances = deductions = ZERO
    for transaction in transactions:
        debit = to_money(transaction.debit_amount)
        total_credit += to_money(transaction.credit_amount)
        total_debit += debit
        if transaction.transaction_type == "avans":
            advances += debit
        elif transaction.transaction_type == "kesinti":
            deductions += debit

    return LedgerSummary(
        total_credit=total_credit,
        total_debit=total_debit,
        total_advances=advances,
        total_deductions=deductions,
    )
