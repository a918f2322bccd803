from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProductCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    barcode: str | None = Field(default=None, max_length=100)
    category: str | None = None
    unit: str = "adet"
    purchase_price: Decimal = Field(default=Decimal("0"), ge=0)
    sale_price: Decimal = Field(ge=0)
    vat_rate: Decimal = Field(default=Decimal("20"), ge=0, le=100)
    vat_included: bool = False
    stock_quantity: int = Field(default=0, ge=0)
    min_stock_level: int = Field(default=0, ge=0)


class ProductUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    barcode: str | None = Field(default=None, max_length=100)
    category: str | None = None
    purchase_price: Decimal | None = Field(default=None, ge=0)
    sale_price: Decimal | None = Field(default=None, ge=0)
    vat_rate: Decimal | None = Field(default=None, ge=0, le=100)
    vat_included: bool | None = None
    min_stock_level: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class StockIncreaseRequest(BaseModel):
    qty: int = Field(gt=0)
    reason: str | None = None


class StockLevelResponse(BaseModel):
    product_id: int
    stock_quantity: int


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    barcode: str | None
    category: str | None
    unit: str
    purchase_price: float
    sale_price: float
    vat_rate: float
    vat_included: bool
    stock_quantity: int
    min_stock_level: int
    is_active: bool
