"""Checkout commit.

A sale is written in one database transaction: sale number, sale row, sale
items, stock decrements, cash movements for the cash and card portions and
the customer balance increment for the credit portion. Any failure rolls all
of it back.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from retailpos.core.config import settings
from retailpos.errors import ErrorType
from retailpos.exceptions import AppException, from_integrity_error
from retailpos.models import Customer, Product, Sale, SaleItem, User
from retailpos.services.cart import Cart
from retailpos.services.cash_drawer import record_movement
from retailpos.services.customer_ledger import add_to_balance
from retailpos.services.numbering import next_document_number
from retailpos.services.payments import PaymentSplit, PaymentType, split_payment
from retailpos.services.stock import decrement_stock
from retailpos.services.vat import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class CheckoutLine:
    product_id: int
    quantity: int
    unit_price: Decimal | None = None
    discount: Decimal | None = None


@dataclass(frozen=True)
class PaymentRequest:
    payment_type: PaymentType
    paid_amount: Decimal | None = None
    cash_amount: Decimal | None = None
    card_amount: Decimal | None = None


def build_cart(db: Session, lines: list[CheckoutLine], customer_id: int | None = None) -> Cart:
    """Price request lines from the product catalogue."""
    product_ids = {line.product_id for line in lines}
    products = {
        product.id: product
        for product in db.execute(
            select(Product).where(Product.id.in_(product_ids), Product.is_active.is_(True))
        ).scalars()
    }

    cart = Cart(customer_id=customer_id)
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            raise AppException(ErrorType.NOT_FOUND, f"Ürün bulunamadı: {line.product_id}")
        cart.add(product, line.quantity, unit_price=line.unit_price, discount=line.discount)
    return cart


def find_by_idempotency_key(db: Session, branch_id: int, key: str) -> Sale | None:
    return db.execute(
        select(Sale)
        .options(selectinload(Sale.items))
        .where(Sale.branch_id == branch_id, Sale.idempotency_key == key)
    ).scalar_one_or_none()


def _same_cart(sale: Sale, cart: Cart) -> bool:
    """Whether a stored sale was made from the same lines and total as the cart."""
    stored = sorted((item.product_id, item.quantity) for item in sale.items)
    requested = sorted((line.product_id, line.quantity) for line in cart.lines)
    return stored == requested and to_money(sale.net_amount) == cart.totals().net_amount


def commit_sale(
    db: Session,
    user: User,
    cart: Cart,
    payment: PaymentRequest,
    *,
    due_date: date | None = None,
    notes: str | None = None,
    idempotency_key: str | None = None,
    on_date: date | None = None,
) -> Sale:
    if cart.is_empty:
        raise AppException(ErrorType.VALIDATION, "Sepet boş")
    if not user.branch_id:
        raise AppException(ErrorType.VALIDATION, "Kullanıcı şubesi bulunamadı")

    if idempotency_key:
        existing = find_by_idempotency_key(db, user.branch_id, idempotency_key)
        if existing is not None:
            if not _same_cart(existing, cart):
                raise AppException(
                    ErrorType.CONFLICT, "Bu işlem anahtarı farklı bir satış için kullanılmış"
                )
            logger.info(f"Checkout replay for key {idempotency_key}, returning sale {existing.sale_number}")
            return existing

    if cart.customer_id is not None:
        customer = db.get(Customer, cart.customer_id)
        if customer is None or not customer.is_active:
            raise AppException(ErrorType.NOT_FOUND, "Müşteri bulunamadı")

    totals = cart.totals()
    split = split_payment(
        payment.payment_type,
        totals.net_amount,
        has_customer=cart.customer_id is not None,
        paid_amount=payment.paid_amount,
        cash_amount=payment.cash_amount,
        card_amount=payment.card_amount,
    )
    on_date = on_date or date.today()

    try:
        sale_number = next_document_number(db, Sale.sale_number, "SAT", on_date)
        sale = Sale(
            sale_number=sale_number,
            branch_id=user.branch_id,
            user_id=user.id,
            customer_id=cart.customer_id,
            total_amount=totals.subtotal,
            discount_amount=totals.discount_total,
            tax_amount=totals.tax_amount,
            net_amount=totals.net_amount,
            payment_type=split.payment_type.value,
            cash_amount=split.cash,
            pos_amount=split.card,
            credit_amount=split.credit,
            paid_amount=split.paid_amount,
            change_amount=split.change_amount,
            status=split.status,
            sale_date=on_date,
            due_date=due_date,
            notes=notes,
            idempotency_key=idempotency_key,
        )
        sale.items = [
            SaleItem(
                product_id=line.product_id,
                product_name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount_amount=line.discount,
                vat_rate=line.vat_rate,
                vat_amount=line.vat_amount,
                total_amount=line.total,
            )
            for line in cart.lines
        ]
        db.add(sale)
        db.flush()

        for line in cart.lines:
            decrement_stock(db, line.product_id, line.quantity, allow_oversell=settings.allow_oversell)

        _record_sale_movements(db, sale, split)

        if split.credit > ZERO:
            add_to_balance(
                db,
                cart.customer_id,
                split.credit,
                enforce_credit_limit=settings.enforce_credit_limit,
            )

        db.commit()
    except AppException as exc:
        db.rollback()
        logger.warning(f"Checkout rolled back: {exc.message}")
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning(f"Checkout rolled back on constraint violation: {exc.orig}")
        raise from_integrity_error(exc)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Checkout failed: {exc}")
        raise AppException(ErrorType.DATABASE, "Satış kaydedilemedi") from exc

    logger.info(
        f"Sale {sale.sale_number} committed: net {sale.net_amount} "
        f"(cash {split.cash}, card {split.card}, credit {split.credit})"
    )
    return sale


def _record_sale_movements(db: Session, sale: Sale, split: PaymentSplit) -> None:
    portions = (("cash", split.cash), ("pos", split.card))
    for method, amount in portions:
        if amount <= ZERO:
            continue
        record_movement(
            db,
            branch_id=sale.branch_id,
            user_id=sale.user_id,
            movement_type="sale",
            payment_method=method,
            amount=amount,
            description=f"Satış - {sale.sale_number}",
            reference_number=sale.sale_number,
            movement_date=sale.sale_date,
            sale_id=sale.id,
        )
