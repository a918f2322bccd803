from datetime import date

from pydantic import BaseModel, Field


class TurkcellTransactionRequest(BaseModel):
    transaction_type: str = Field(min_length=1, max_length=50)
    count: int = Field(default=1, gt=0)
    transaction_date: date | None = None
    description: str | None = None
    reference_number: str | None = None


class TurkcellTargetRequest(BaseModel):
    target_count: int = Field(gt=0)
    month: date | None = None


class TurkcellDailyResponse(BaseModel):
    date: date
    total: int


class TurkcellProgressResponse(BaseModel):
    month: date
    total: int
    target: int
    progress: float
