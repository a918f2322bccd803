"""Allocation of a sale's net amount across cash, card (POS) and store credit."""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from retailpos.core.config import settings
from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.services.vat import to_money

ZERO = Decimal("0")


class PaymentType(str, Enum):
    CASH = "cash"
    POS = "pos"
    CREDIT = "credit"
    PARTIAL = "partial"


@dataclass(frozen=True)
class PaymentSplit:
    payment_type: PaymentType
    cash: Decimal
    card: Decimal
    credit: Decimal
    paid_amount: Decimal
    change_amount: Decimal

    @property
    def total(self) -> Decimal:
        return self.cash + self.card + self.credit

    @property
    def status(self) -> str:
        return "paid" if self.credit == ZERO else "pending"


def split_payment(
    payment_type: PaymentType,
    net_amount,
    *,
    has_customer: bool,
    paid_amount=None,
    cash_amount=None,
    card_amount=None,
) -> PaymentSplit:
    """Split ``net_amount`` according to the payment mode.

    ``paid_amount`` is the cash tendered in CASH mode (defaults to the exact
    amount). In PARTIAL mode ``cash_amount`` is entered by the operator; the
    remainder goes to card when there is no customer, otherwise ``card_amount``
    is taken as entered and whatever is left goes on the customer's account.
    """
    payment_type = PaymentType(payment_type)
    net = to_money(net_amount)
    cash = card = credit = change = ZERO

    if payment_type is PaymentType.CASH:
        tendered = net if paid_amount is None else to_money(paid_amount)
        if tendered < net:
            raise AppException(ErrorType.PAYMENT_MISMATCH, "Ödenen tutar satış tutarından az olamaz")
        cash = net
        change = tendered - net
    elif payment_type is PaymentType.POS:
        card = net
    elif payment_type is PaymentType.CREDIT:
        if not has_customer:
            raise AppException(ErrorType.VALIDATION, "Açık hesap satış için müşteri seçilmelidir")
        credit = net
    else:
        cash = to_money(cash_amount or 0)
        remaining = net - cash
        if has_customer:
            card = to_money(card_amount or 0)
            credit = max(ZERO, remaining - card)
        else:
            card = max(ZERO, remaining)

    split = PaymentSplit(
        payment_type=payment_type,
        cash=cash,
        card=card,
        credit=credit,
        paid_amount=cash + card + change,
        change_amount=change,
    )
    validate_split(split, net, has_customer=has_customer)
    return split


def validate_split(split: PaymentSplit, net_amount, *, has_customer: bool) -> None:
    if min(split.cash, split.card, split.credit) < ZERO:
        raise AppException(ErrorType.PAYMENT_MISMATCH, "Ödeme tutarları negatif olamaz")
    if split.credit > ZERO and not has_customer:
        raise AppException(ErrorType.VALIDATION, "Açık hesap satış için müşteri seçilmelidir")
    if abs(split.total - to_money(net_amount)) > settings.payment_epsilon:
        raise AppException(
            ErrorType.PAYMENT_MISMATCH,
            "Toplam ödeme tutarı ile satış tutarı eşleşmiyor",
        )
