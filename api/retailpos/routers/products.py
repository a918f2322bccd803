from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from retailpos.db.session import get_db
from retailpos.exceptions import from_integrity_error
from retailpos.models import Product, User
from retailpos.schemas.inventory import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
    StockIncreaseRequest,
    StockLevelResponse,
)
from retailpos.services.deps import get_current_user, require_roles
from retailpos.services.stock import low_stock_products, receive_stock

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(
    payload: ProductCreateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles("admin", "manager")),
):
    product = Product(**payload.model_dump())
    db.add(product)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise from_integrity_error(exc)
    return product


@router.get("", response_model=list[ProductResponse])
def list_products(
    q: str | None = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    stmt = select(Product).where(Product.is_active.is_(True))
    if q:
        stmt = stmt.where(or_(Product.name.ilike(f"%{q}%"), Product.barcode == q))
    return db.execute(stmt.order_by(Product.name.asc()).limit(limit)).scalars().all()


@router.get("/alerts/low-stock", response_model=list[ProductResponse])
def low_stock_alerts(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return low_stock_products(db)


@router.get("/by-barcode/{barcode}", response_model=ProductResponse)
def product_by_barcode(
    barcode: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    product = db.execute(select(Product).where(Product.barcode == barcode)).scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=404, detail="Ürün bulunamadı")
    return product


@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    payload: ProductUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles("admin", "manager")),
):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Ürün bulunamadı")

    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(product, key, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise from_integrity_error(exc)
    return product


@router.post("/{product_id}/stock-in", response_model=StockLevelResponse)
def stock_in(
    product_id: int,
    payload: StockIncreaseRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles("admin", "manager")),
):
    new_level = receive_stock(db, product_id, payload.qty)
    return StockLevelResponse(product_id=product_id, stock_quantity=new_level)
