from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from retailpos.db.session import get_db
from retailpos.models import Customer, Product, User
from retailpos.schemas.sales import (
    CartCheckoutRequest,
    CartCustomerRequest,
    CartItemRequest,
    CartItemUpdateRequest,
    CartLineResponse,
    CartResponse,
    SaleDetailResponse,
)
from retailpos.services.cart import Cart, CartStore
from retailpos.services.checkout import PaymentRequest, commit_sale
from retailpos.services.deps import get_cart_store, get_current_user

router = APIRouter(prefix="/pos/cart", tags=["pos"])


def cart_response(cart: Cart) -> CartResponse:
    totals = cart.totals()
    return CartResponse(
        customer_id=cart.customer_id,
        items=[
            CartLineResponse(
                product_id=line.product_id,
                name=line.name,
                qty=line.quantity,
                unit_price=float(line.unit_price),
                discount=float(line.discount),
                vat_rate=float(line.vat_rate),
                vat_included=line.vat_included,
                vat_amount=float(line.vat_amount),
                total=float(line.total),
            )
            for line in cart.lines
        ],
        item_count=totals.item_count,
        subtotal=float(totals.subtotal),
        discount_total=float(totals.discount_total),
        tax_amount=float(totals.tax_amount),
        included_tax_amount=float(totals.included_tax_amount),
        net_amount=float(totals.net_amount),
    )


@router.get("", response_model=CartResponse)
def get_cart(
    user: User = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    with carts.locked(user.id) as cart:
        return cart_response(cart)


@router.post("/items", response_model=CartResponse)
def add_item(
    payload: CartItemRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    if payload.product_id is None and not payload.barcode:
        raise HTTPException(status_code=400, detail="Ürün veya barkod gereklidir")

    stmt = select(Product).where(Product.is_active.is_(True))
    if payload.product_id is not None:
        stmt = stmt.where(Product.id == payload.product_id)
    else:
        stmt = stmt.where(Product.barcode == payload.barcode)
    product = db.execute(stmt).scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=404, detail="Ürün bulunamadı")

    with carts.locked(user.id) as cart:
        cart.add(product, payload.qty, unit_price=payload.unit_price)
        return cart_response(cart)


@router.patch("/items/{product_id}", response_model=CartResponse)
def update_item(
    product_id: int,
    payload: CartItemUpdateRequest,
    user: User = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    with carts.locked(user.id) as cart:
        if payload.qty is not None:
            cart.set_quantity(product_id, payload.qty)
        if payload.discount is not None and (payload.qty is None or payload.qty > 0):
            cart.set_discount(product_id, payload.discount)
        return cart_response(cart)


@router.delete("/items/{product_id}", response_model=CartResponse)
def remove_item(
    product_id: int,
    user: User = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    with carts.locked(user.id) as cart:
        cart.remove(product_id)
        return cart_response(cart)


@router.delete("", response_model=CartResponse)
def clear_cart(
    user: User = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    with carts.locked(user.id) as cart:
        cart.clear()
        return cart_response(cart)


@router.put("/customer", response_model=CartResponse)
def set_customer(
    payload: CartCustomerRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    if payload.customer_id is not None:
        customer = db.get(Customer, payload.customer_id)
        if not customer or not customer.is_active:
            raise HTTPException(status_code=404, detail="Müşteri bulunamadı")

    with carts.locked(user.id) as cart:
        cart.customer_id = payload.customer_id
        return cart_response(cart)


@router.post("/checkout", response_model=SaleDetailResponse)
def checkout_cart(
    payload: CartCheckoutRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    carts: CartStore = Depends(get_cart_store),
):
    with carts.locked(user.id) as cart:
        sale = commit_sale(
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
        cart.clear()
    return sale
