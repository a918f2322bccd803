from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PersonnelCreateRequest(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    national_id: str | None = Field(default=None, min_length=11, max_length=11)
    position: str | None = None
    phone: str | None = None
    salary: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: date | None = None


class PersonnelUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    position: str | None = None
    phone: str | None = None
    salary: Decimal | None = Field(default=None, ge=0)
    end_date: date | None = None
    is_active: bool | None = None


class PersonnelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    full_name: str
    position: str | None
    phone: str | None
    salary: float
    start_date: date | None
    end_date: date | None
    is_active: bool


class TransactionCreateRequest(BaseModel):
    transaction_type: Literal["hakedis", "avans", "odeme", "kesinti"]
    amount: Decimal = Field(gt=0)
    description: str = Field(min_length=1)
    transaction_date: date | None = None
    payment_type: Literal["cash", "bank"] | None = "cash"
    notes: str | None = None


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_number: str
    transaction_date: date
    transaction_type: str
    description: str
    debit_amount: float
    credit_amount: float
    payment_type: str | None
    notes: str | None
    balance: float | None = None


class LedgerSummaryResponse(BaseModel):
    total_credit: float
    total_debit: float
    balance: float
    total_advances: float
    total_deductions: float
    remaining_advance: float
