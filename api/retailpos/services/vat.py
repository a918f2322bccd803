"""VAT (KDV) helpers for prices that either include or exclude the tax."""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_money(value) -> Decimal:
    """Round a number to kuruş precision."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class VatPrices:
    vat_excluded: Decimal
    vat_included: Decimal
    vat_amount: Decimal


def calculate_vat_prices(price, vat_rate, vat_included: bool) -> VatPrices:
    price = Decimal(str(price))
    vat_rate = Decimal(str(vat_rate))
    if price < 0:
        raise AppException(ErrorType.VALIDATION, "Fiyat negatif olamaz")
    if vat_rate < 0 or vat_rate > HUNDRED:
        raise AppException(ErrorType.VALIDATION, "KDV oranı 0-100 arası olmalıdır")

    if vat_included:
        excluded = price / (1 + vat_rate / HUNDRED)
        return VatPrices(
            vat_excluded=to_money(excluded),
            vat_included=to_money(price),
            vat_amount=to_money(price - excluded),
        )

    amount = price * vat_rate / HUNDRED
    return VatPrices(
        vat_excluded=to_money(price),
        vat_included=to_money(price + amount),
        vat_amount=to_money(amount),
    )

