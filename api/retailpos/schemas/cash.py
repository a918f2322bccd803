from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class DrawerRequest(BaseModel):
    amount: Decimal = Field(ge=0)
    description: str | None = None


class CashEntryRequest(BaseModel):
    amount: Decimal = Field(gt=0)
    description: str = Field(min_length=1)
    reference_number: str | None = None


class CashMovementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    movement_type: str
    payment_method: str
    amount: float
    description: str | None
    reference_number: str | None
    movement_date: date
    sale_id: int | None
    sale_number: str | None = None


class DailyCashSummaryResponse(BaseModel):
    date: date
    opening_amount: float
    closing_amount: float
    total_sales: float
    total_card_sales: float
    total_income: float
    total_expense: float
    expected_cash: float
    cash_difference: float
    movement_count: int
    is_open: bool
    is_closed: bool
