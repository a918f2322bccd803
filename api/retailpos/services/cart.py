"""Point-of-sale cart.

A cart is a list of lines plus an optional customer. Every mutation leaves the
lines in a valid state and totals are always derived from the lines, never
kept as running sums.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from threading import Lock

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.services.vat import calculate_vat_prices, to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class CartLine:
    product_id: int
    name: str
    quantity: int
    unit_price: Decimal
    discount: Decimal = ZERO
    vat_rate: Decimal = ZERO
    vat_included: bool = False

    @property
    def gross(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)

    @property
    def taxable(self) -> Decimal:
        return self.gross - self.discount

    @property
    def vat_amount(self) -> Decimal:
        return calculate_vat_prices(self.taxable, self.vat_rate, self.vat_included).vat_amount

    @property
    def tax(self) -> Decimal:
        """VAT added on top of the price (exclusive lines only)."""
        return ZERO if self.vat_included else self.vat_amount

    @property
    def included_tax(self) -> Decimal:
        """VAT already contained in the price (inclusive lines only)."""
        return self.vat_amount if self.vat_included else ZERO

    @property
    def total(self) -> Decimal:
        return self.taxable + self.tax

    def clamp_discount(self) -> None:
        self.discount = min(max(ZERO, to_money(self.discount)), self.gross)


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    discount_total: Decimal
    tax_amount: Decimal
    included_tax_amount: Decimal
    net_amount: Decimal
    item_count: int


def compute_totals(lines: list[CartLine]) -> CartTotals:
    subtotal = sum((line.gross for line in lines), ZERO)
    discount_total = sum((line.discount for line in lines), ZERO)
    tax_amount = sum((line.tax for line in lines), ZERO)
    included = sum((line.included_tax for line in lines), ZERO)
    return CartTotals(
        subtotal=subtotal,
        discount_total=discount_total,
        tax_amount=tax_amount,
        included_tax_amount=included,
        net_amount=subtotal - discount_total + tax_amount,
        item_count=sum(line.quantity for line in lines),
    )


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)
    customer_id: int | None = None

    def _find(self, product_id: int) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def add(self, product, quantity: int = 1, unit_price=None, discount=None) -> CartLine:
        """Add a product, merging with an existing line for the same product."""
        if quantity <= 0:
            raise AppException(ErrorType.VALIDATION, "Miktar sıfırdan büyük olmalıdır")

        line = self._find(product.id)
        if line is None:
            price = product.sale_price if unit_price is None else unit_price
            if Decimal(str(price)) < 0:
                raise AppException(ErrorType.VALIDATION, "Fiyat negatif olamaz")
            line = CartLine(
                product_id=product.id,
                name=product.name,
                quantity=quantity,
                unit_price=to_money(price),
                vat_rate=Decimal(str(product.vat_rate or 0)),
                vat_included=bool(product.vat_included),
            )
            self.lines.append(line)
        else:
            line.quantity += quantity

        if discount is not None:
            line.discount = Decimal(str(discount))
        line.clamp_discount()
        return line

    def set_quantity(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            self.remove(product_id)
            return
        line = self._require(product_id)
        line.quantity = quantity
        line.clamp_discount()

    def set_discount(self, product_id: int, amount) -> None:
        line = self._require(product_id)
        line.discount = Decimal(str(amount))
        line.clamp_discount()

    def remove(self, product_id: int) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def clear(self) -> None:
        self.lines = []
        self.customer_id = None

    def totals(self) -> CartTotals:
        return compute_totals(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def _require(self, product_id: int) -> CartLine:
        line = self._find(product_id)
        if line is None:
            raise AppException(ErrorType.NOT_FOUND, "Ürün sepette bulunamadı")
        return line


class CartStore:
    """Holds one cart per logged-in user for the lifetime of the application.

    The registry itself is guarded by one lock. Each cart also has its own
    lock, taken through :meth:`locked`, so requests of the same user run
    their cart changes one at a time.
    """

    def __init__(self):
        self._carts: dict[int, Cart] = {}
        self._cart_locks: dict[int, Lock] = {}
        self._lock = Lock()

    def get(self, user_id: int) -> Cart:
        with self._lock:
            cart = self._carts.get(user_id)
            if cart is None:
                cart = self._carts[user_id] = Cart()
            return cart

    @contextmanager
    def locked(self, user_id: int):
        """Yield the user's cart while holding that cart's lock."""
        with self._lock:
            cart_lock = self._cart_locks.setdefault(user_id, Lock())
        with cart_lock:
            yield self.get(user_id)

    def discard(self, user_id: int) -> None:
        with self._lock:
            if self._carts.pop(user_id, None) is not None:
                logger.info(f"Discarded cart of user {user_id}")

    def close(self) -> None:
        with self._lock:
            self._carts.clear()
            self._cart_locks.clear()
