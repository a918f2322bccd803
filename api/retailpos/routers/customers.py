from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from retailpos.db.session import get_db
from retailpos.models import Customer, User
from retailpos.schemas.customers import (
    BalanceReportResponse,
    CustomerCreateRequest,
    CustomerResponse,
    CustomerUpdateRequest,
    OverdueSaleResponse,
    PaymentCreateRequest,
    PaymentResponse,
)
from retailpos.schemas.sales import SaleResponse
from retailpos.services import customer_ledger
from retailpos.services import sales as sales_service
from retailpos.services.deps import get_current_user, require_roles

router = APIRouter(prefix="/customers", tags=["customers"])


def get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Müşteri bulunamadı")
    return customer


def overdue_response(item: customer_ledger.OverdueSale) -> OverdueSaleResponse:
    return OverdueSaleResponse(
        sale_id=item.sale.id,
        sale_number=item.sale.sale_number,
        customer_id=item.customer.id,
        customer_name=item.customer.name,
        due_date=item.sale.due_date,
        days_past_due=item.days_past_due,
        overdue_amount=float(item.overdue_amount),
    )


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(
    payload: CustomerCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    customer = Customer(**payload.model_dump())
    db.add(customer)
    db.commit()
    return customer


@router.get("", response_model=list[CustomerResponse])
def list_customers(
    q: str | None = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    stmt = select(Customer).where(Customer.is_active.is_(True))
    if q:
        stmt = stmt.where(or_(Customer.name.ilike(f"%{q}%"), Customer.phone == q))
    return db.execute(stmt.order_by(Customer.name.asc()).limit(limit)).scalars().all()


@router.get("/reports/balance", response_model=BalanceReportResponse)
def balance_report(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles("admin", "manager")),
):
    report = customer_ledger.balance_report(db)
    report["overdue"] = [overdue_response(item) for item in report["overdue"]]
    return report


@router.get("/reports/overdue", response_model=list[OverdueSaleResponse])
def overdue_payments(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return [overdue_response(item) for item in customer_ledger.overdue_sales(db, date.today())]


@router.get("/reports/near-limit", response_model=list[CustomerResponse])
def near_credit_limit(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return customer_ledger.customers_near_credit_limit(db)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return get_customer_or_404(db, customer_id)


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    payload: CustomerUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    customer = get_customer_or_404(db, customer_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(customer, key, value)
    db.commit()
    return customer


@router.get("/{customer_id}/sales", response_model=list[SaleResponse])
def customer_sales(
    customer_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_customer_or_404(db, customer_id)
    return sales_service.list_sales(db, user.branch_id, customer_id=customer_id)


@router.post("/{customer_id}/payments", response_model=PaymentResponse, status_code=201)
def create_payment(
    customer_id: int,
    payload: PaymentCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    get_customer_or_404(db, customer_id)
    return customer_ledger.record_payment(
        db,
        user,
        customer_id,
        payload.amount,
        payment_method=payload.payment_method,
        description=payload.description,
        payment_date=payload.payment_date,
    )


@router.get("/{customer_id}/payments", response_model=list[PaymentResponse])
def list_payments(
    customer_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    get_customer_or_404(db, customer_id)
    return customer_ledger.payment_history(db, customer_id)


@router.delete("/payments/{payment_id}", status_code=204)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles("admin", "manager")),
):
    customer_ledger.delete_payment(db, payment_id)
