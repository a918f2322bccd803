from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CustomerCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    tax_number: str | None = Field(default=None, max_length=20)
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0)


class CustomerUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    tax_number: str | None = Field(default=None, max_length=20)
    credit_limit: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str | None
    email: str | None
    tax_number: str | None
    current_balance: float
    credit_limit: float
    is_active: bool


class PaymentCreateRequest(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_method: str = Field(default="cash", pattern="^(cash|pos|bank)$")
    description: str | None = None
    payment_date: date | None = None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    payment_number: str
    customer_id: int
    amount: float
    payment_method: str
    payment_date: date
    description: str | None


class OverdueSaleResponse(BaseModel):
    sale_id: int
    sale_number: str
    customer_id: int
    customer_name: str
    due_date: date | None
    days_past_due: int
    overdue_amount: float


class BalanceReportResponse(BaseModel):
    total_outstanding: float
    total_overdue: float
    customers_with_debt: int
    total_customers: int
    average_debt: float
    debtors: list[CustomerResponse]
    overdue: list[OverdueSaleResponse]
    near_credit_limit: list[CustomerResponse]
