from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from retailpos.services.payments import PaymentType


class SaleItemInput(BaseModel):
    product_id: int
    qty: int = Field(gt=0)
    unit_price: Decimal | None = Field(default=None, ge=0)
    discount: Decimal | None = Field(default=None, ge=0)


class PaymentInput(BaseModel):
    payment_type: PaymentType = PaymentType.CASH
    paid_amount: Decimal | None = Field(default=None, ge=0)
    cash_amount: Decimal | None = Field(default=None, ge=0)
    card_amount: Decimal | None = Field(default=None, ge=0)


class CheckoutRequest(PaymentInput):
    customer_id: int | None = None
    items: list[SaleItemInput]
    due_date: date | None = None
    notes: str | None = None
    idempotency_key: str | None = Field(default=None, max_length=100)


class CartCheckoutRequest(PaymentInput):
    due_date: date | None = None
    notes: str | None = None
    idempotency_key: str | None = Field(default=None, max_length=100)


class CartItemRequest(BaseModel):
    product_id: int | None = None
    barcode: str | None = None
    qty: int = Field(default=1, gt=0)
    unit_price: Decimal | None = Field(default=None, ge=0)


class CartItemUpdateRequest(BaseModel):
    qty: int | None = None
    discount: Decimal | None = Field(default=None, ge=0)


class CartCustomerRequest(BaseModel):
    customer_id: int | None = None


class CartLineResponse(BaseModel):
    product_id: int
    name: str
    qty: int
    unit_price: float
    discount: float
    vat_rate: float
    vat_included: bool
    vat_amount: float
    total: float


class CartResponse(BaseModel):
    customer_id: int | None
    items: list[CartLineResponse]
    item_count: int
    subtotal: float
    discount_total: float
    tax_amount: float
    included_tax_amount: float
    net_amount: float


class SaleItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int | None
    product_name: str
    quantity: int
    unit_price: float
    discount_amount: float
    vat_rate: float
    vat_amount: float
    total_amount: float


class SaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sale_number: str
    customer_id: int | None
    total_amount: float
    discount_amount: float
    tax_amount: float
    net_amount: float
    payment_type: str
    cash_amount: float
    pos_amount: float
    credit_amount: float
    paid_amount: float
    change_amount: float
    status: str
    sale_date: date
    due_date: date | None
    notes: str | None


class SaleDetailResponse(SaleResponse):
    items: list[SaleItemResponse]


class SaleUpdateRequest(BaseModel):
    due_date: date | None = None
    notes: str | None = None


class DailySalesSummary(BaseModel):
    date: date
    total_sales: int
    total_amount: float
    cash_sales: float
    pos_sales: float
    credit_sales: float
