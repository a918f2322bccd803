import random
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.services import cash_drawer
from retailpos.services.checkout import CheckoutLine, PaymentRequest, build_cart, commit_sale
from retailpos.services.payments import PaymentType


def movement(movement_type, amount, payment_method="cash"):
    return SimpleNamespace(movement_type=movement_type, amount=Decimal(amount), payment_method=payment_method)


class TestSummarizeMovements:
    """Tests for the pure drawer reconciliation."""

    def test_expected_cash_and_difference(self):
        summary = cash_drawer.summarize_movements(
            [
                movement("opening", "500"),
                movement("sale", "120"),
                movement("expense", "30"),
                movement("closing", "585"),
            ]
        )

        assert summary.expected_cash == Decimal("590.00")
        assert summary.cash_difference == Decimal("-5.00")
        assert summary.is_closed
        assert not summary.is_open

    def test_card_sales_count_toward_expected_cash(self):
        summary = cash_drawer.summarize_movements(
            [movement("opening", "500"), movement("sale", "50"), movement("sale", "70", "pos")]
        )

        assert summary.total_sales == Decimal("120.00")
        assert summary.total_card_sales == Decimal("70.00")
        assert summary.expected_cash == Decimal("620.00")
        assert summary.is_open

    def test_order_does_not_matter(self):
        movements = [
            movement("opening", "500"),
            movement("sale", "19.99"),
            movement("sale", "45.50", "pos"),
            movement("income", "12.30"),
            movement("expense", "7.75"),
            movement("expense", "3.10"),
            movement("closing", "520.00"),
        ]
        expected = cash_drawer.summarize_movements(movements)

        shuffled = movements[:]
        random.Random(7).shuffle(shuffled)

        assert cash_drawer.summarize_movements(reversed(movements)) == expected
        assert cash_drawer.summarize_movements(shuffled) == expected

    def test_empty_day(self):
        summary = cash_drawer.summarize_movements([])

        assert summary.expected_cash == Decimal("0")
        assert not summary.is_open
        assert not summary.is_closed


class TestDrawerLifecycle:
    """Tests for opening, entries and closing against the database."""

    def test_full_day(self, db, seed):
        cash_drawer.open_drawer(db, seed.cashier, Decimal("500"))
        commit_sale(
            db,
            seed.cashier,
            build_cart(db, [CheckoutLine(seed.headphones.id, 1)]),
            PaymentRequest(PaymentType.CASH, paid_amount=Decimal("200")),
        )
        cash_drawer.add_expense(db, seed.cashier, Decimal("30"), "Temizlik malzemesi")

        summary = cash_drawer.close_drawer(db, seed.cashier, Decimal("585"))

        assert summary.opening_amount == Decimal("500.00")
        assert summary.total_sales == Decimal("120.00")
        assert summary.expected_cash == Decimal("590.00")
        assert summary.cash_difference == Decimal("-5.00")
        assert summary.movement_count == 4

    def test_second_opening_rejected(self, db, seed):
        cash_drawer.open_drawer(db, seed.cashier, Decimal("500"))

        with pytest.raises(AppException) as exc_info:
            cash_drawer.open_drawer(db, seed.admin, Decimal("100"))

        assert exc_info.value.error_type == ErrorType.CONFLICT

    def test_unique_guard_blocks_duplicate_opening(self, db, seed):
        """The database refuses a second opening even if the pre-check is bypassed."""
        today = date.today()
        cash_drawer.open_drawer(db, seed.cashier, Decimal("500"), on_date=today)

        with pytest.raises(AppException) as exc_info:
            cash_drawer._commit_movement(
                db,
                branch_id=seed.branch.id,
                user_id=seed.admin.id,
                movement_type="opening",
                amount=Decimal("100"),
                movement_date=today,
            )

        assert exc_info.value.error_type == ErrorType.CONFLICT
        assert cash_drawer.daily_summary(db, seed.branch.id, today).opening_amount == Decimal("500.00")

    def test_close_requires_opening(self, db, seed):
        with pytest.raises(AppException) as exc_info:
            cash_drawer.close_drawer(db, seed.cashier, Decimal("0"))

        assert exc_info.value.error_type == ErrorType.VALIDATION

    def test_second_closing_rejected(self, db, seed):
        cash_drawer.open_drawer(db, seed.cashier, Decimal("100"))
        cash_drawer.close_drawer(db, seed.cashier, Decimal("100"))

        with pytest.raises(AppException) as exc_info:
            cash_drawer.close_drawer(db, seed.cashier, Decimal("100"))

        assert exc_info.value.error_type == ErrorType.CONFLICT

    def test_entries_must_be_positive(self, db, seed):
        with pytest.raises(AppException):
            cash_drawer.add_income(db, seed.cashier, Decimal("0"), "Boş")

    def test_days_are_separate(self, db, seed):
        yesterday = date.today() - timedelta(days=1)
        cash_drawer.open_drawer(db, seed.cashier, Decimal("300"), on_date=yesterday)
        cash_drawer.open_drawer(db, seed.cashier, Decimal("400"))

        assert cash_drawer.daily_summary(db, seed.branch.id, yesterday).opening_amount == Decimal("300.00")
        assert cash_drawer.daily_summary(db, seed.branch.id).opening_amount == Decimal("400.00")
