import logging

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.models import Product

logger = logging.getLogger(__name__)


def decrement_stock(db: Session, product_id: int, quantity: int, *, allow_oversell: bool) -> int:
    """Take ``quantity`` out of stock in a single statement and return the new level.

    With ``allow_oversell`` the level is clamped at zero, otherwise the update
    only applies when enough stock is on hand.
    """
    stmt = update(Product).where(Product.id == product_id)
    if allow_oversell:
        stmt = stmt.values(
            stock_quantity=case(
                (Product.stock_quantity > quantity, Product.stock_quantity - quantity),
                else_=0,
            ),
            updated_at=func.now(),
        )
    else:
        stmt = stmt.where(Product.stock_quantity >= quantity).values(
            stock_quantity=Product.stock_quantity - quantity,
            updated_at=func.now(),
        )

    new_level = db.execute(stmt.returning(Product.stock_quantity)).scalar_one_or_none()
    if new_level is not None:
        return new_level

    product = db.execute(
        select(Product.name, Product.stock_quantity).where(Product.id == product_id)
    ).first()
    if product is None:
        raise AppException(ErrorType.NOT_FOUND, f"Ürün bulunamadı: {product_id}")
    raise AppException(
        ErrorType.INSUFFICIENT_STOCK,
        f"{product.name} için yetersiz stok. Mevcut: {product.stock_quantity}",
    )


def increment_stock(db: Session, product_id: int, quantity: int) -> int:
    if quantity <= 0:
        raise AppException(ErrorType.VALIDATION, "Miktar sıfırdan büyük olmalıdır")

    new_level = db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock_quantity=Product.stock_quantity + quantity, updated_at=func.now())
        .returning(Product.stock_quantity)
    ).scalar_one_or_none()
    if new_level is None:
        raise AppException(ErrorType.NOT_FOUND, f"Ürün bulunamadı: {product_id}")
    return new_level


def receive_stock(db: Session, product_id: int, quantity: int) -> int:
    """Goods receipt: add stock and commit."""
    try:
        new_level = increment_stock(db, product_id, quantity)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Received {quantity} units of product {product_id}, stock now {new_level}")
    return new_level


def low_stock_products(db: Session) -> list[Product]:
    return list(
        db.execute(
            select(Product)
            .where(Product.is_active.is_(True), Product.stock_quantity <= Product.min_stock_level)
            .order_by(Product.stock_quantity.asc(), Product.name.asc())
        ).scalars()
    )
