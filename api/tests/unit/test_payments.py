from decimal import Decimal

import pytest

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.services.payments import PaymentSplit, PaymentType, split_payment, validate_split

NET = Decimal("120.00")


class TestSplitPayment:
    """Tests for allocating a sale across cash, card and credit."""

    def test_cash_exact_amount_by_default(self):
        split = split_payment(PaymentType.CASH, NET, has_customer=False)

        assert split.cash == NET
        assert split.change_amount == Decimal("0")
        assert split.status == "paid"

    def test_cash_with_change(self):
        split = split_payment(PaymentType.CASH, NET, has_customer=False, paid_amount=Decimal("200"))

        assert split.cash == NET
        assert split.change_amount == Decimal("80.00")
        assert split.paid_amount == Decimal("200.00")

    def test_cash_short_tender_rejected(self):
        with pytest.raises(AppException) as exc_info:
            split_payment(PaymentType.CASH, NET, has_customer=False, paid_amount=Decimal("100"))

        assert exc_info.value.error_type == ErrorType.PAYMENT_MISMATCH

    def test_pos_takes_everything_on_card(self):
        split = split_payment("pos", NET, has_customer=False)

        assert (split.cash, split.card, split.credit) == (Decimal("0"), NET, Decimal("0"))

    def test_credit_needs_customer(self):
        with pytest.raises(AppException) as exc_info:
            split_payment(PaymentType.CREDIT, NET, has_customer=False)

        assert exc_info.value.error_type == ErrorType.VALIDATION

    def test_credit_sale_is_pending(self):
        split = split_payment(PaymentType.CREDIT, NET, has_customer=True)

        assert split.credit == NET
        assert split.status == "pending"

    def test_partial_without_customer_sends_rest_to_card(self):
        split = split_payment(PaymentType.PARTIAL, NET, has_customer=False, cash_amount=Decimal("50"))

        assert split.cash == Decimal("50.00")
        assert split.card == Decimal("70.00")
        assert split.credit == Decimal("0")
        assert split.status == "paid"

    def test_partial_with_customer_sends_rest_to_credit(self):
        split = split_payment(PaymentType.PARTIAL, NET, has_customer=True, cash_amount=Decimal("50"))

        assert split.cash == Decimal("50.00")
        assert split.card == Decimal("0.00")
        assert split.credit == Decimal("70.00")
        assert split.status == "pending"

    def test_partial_with_customer_and_card(self):
        split = split_payment(
            PaymentType.PARTIAL,
            NET,
            has_customer=True,
            cash_amount=Decimal("50"),
            card_amount=Decimal("20"),
        )

        assert split.credit == Decimal("50.00")
        assert split.total == NET

    def test_partial_overpayment_rejected(self):
        with pytest.raises(AppException) as exc_info:
            split_payment(
                PaymentType.PARTIAL,
                NET,
                has_customer=True,
                cash_amount=Decimal("50"),
                card_amount=Decimal("100"),
            )

        assert exc_info.value.error_type == ErrorType.PAYMENT_MISMATCH

    def test_partial_cash_above_net_rejected(self):
        with pytest.raises(AppException):
            split_payment(PaymentType.PARTIAL, NET, has_customer=False, cash_amount=Decimal("150"))


class TestValidateSplit:
    """Tests for the bucket sum check."""

    def make_split(self, cash, card="0", credit="0"):
        return PaymentSplit(
            payment_type=PaymentType.PARTIAL,
            cash=Decimal(cash),
            card=Decimal(card),
            credit=Decimal(credit),
            paid_amount=Decimal(cash) + Decimal(card),
            change_amount=Decimal("0"),
        )

    def test_within_epsilon_accepted(self):
        validate_split(self.make_split("60.00", "60.01"), NET, has_customer=False)

    def test_beyond_epsilon_rejected(self):
        with pytest.raises(AppException):
            validate_split(self.make_split("60.00", "60.02"), NET, has_customer=False)

    def test_negative_bucket_rejected(self):
        with pytest.raises(AppException):
            validate_split(self.make_split("130.00", "-10.00"), NET, has_customer=False)

    def test_credit_without_customer_rejected(self):
        with pytest.raises(AppException) as exc_info:
            validate_split(self.make_split("100.00", credit="20.00"), NET, has_customer=False)

        assert exc_info.value.error_type == ErrorType.VALIDATION
