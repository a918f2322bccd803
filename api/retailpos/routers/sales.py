from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from retailpos.db.session import get_db
from retailpos.models import User
from retailpos.schemas.sales import (
    CheckoutRequest,
    DailySalesSummary,
    SaleDetailResponse,
    SaleResponse,
    SaleUpdateRequest,
)
from retailpos.services import sales as sales_service
from retailpos.services.checkout import CheckoutLine, PaymentRequest, build_cart, commit_sale
from retailpos.services.deps import get_current_user, require_roles

router = APIRouter(prefix="/sales", tags=["sales"])


@router.post("/checkout", response_model=SaleDetailResponse)
def checkout(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    cart = build_cart(
        db,
        [
            CheckoutLine(
                product_id=item.product_id,
                quantity=item.qty,
                unit_price=item.unit_price,
                discount=item.discount,
            )
            for item in payload.items
        ],
        customer_id=payload.customer_id,
    )
    return commit_sale(
        db,
        user,
        cart,
        PaymentRequest(
            payment_type=payload.payment_type,
            paid_amount=payload.paid_amount,
            cash_amount=payload.cash_amount,
            card_amount=payload.card_amount,
        ),
        due_date=payload.due_date,
        notes=payload.notes,
        idempotency_key=payload.idempotency_key,
    )


@router.get("", response_model=list[SaleResponse])
def list_sales(
    start: date | None = None,
    end: date | None = None,
    customer_id: int | None = None,
    payment_type: str | None = None,
    status: str | None = None,
    limit: int = 100,
    offset: int = 0,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return sales_service.list_sales(
        db,
        user.branch_id,
        start=start,
        end=end,
        customer_id=customer_id,
        payment_type=payment_type,
        status=status,
        limit=limit,
        offset=offset,
    )


@router.get("/summary/daily", response_model=DailySalesSummary)
def daily_summary(
    day: date | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return sales_service.daily_sales_summary(db, user.branch_id, day)


@router.get("/{sale_id}", response_model=SaleDetailResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return sales_service.get_sale(db, user.branch_id, sale_id)


@router.patch("/{sale_id}", response_model=SaleResponse)
def update_sale(
    sale_id: int,
    payload: SaleUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return sales_service.update_sale(db, user.branch_id, sale_id, payload.model_dump(exclude_unset=True))


@router.delete("/{sale_id}", status_code=204)
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles("admin", "manager")),
):
    sales_service.delete_sale(db, user.branch_id, sale_id)
