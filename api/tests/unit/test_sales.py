from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.models import CashMovement, Sale, SaleItem
from retailpos.services import cash_drawer
from retailpos.services import sales as sales_service
from retailpos.services.checkout import CheckoutLine, PaymentRequest, build_cart, commit_sale
from retailpos.services.payments import PaymentType


def count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def partial_sale(db, seed):
    """Two headphones and a tea on account: 50 in cash, 240 on credit."""
    cart = build_cart(
        db, [CheckoutLine(seed.headphones.id, 2), CheckoutLine(seed.tea.id, 1)], customer_id=seed.customer.id
    )
    return commit_sale(
        db, seed.cashier, cart, PaymentRequest(PaymentType.PARTIAL, cash_amount=Decimal("50"))
    )


class TestBranchScope:
    """Tests for keeping sales inside the branch that made them."""

    def test_sale_of_another_branch_is_not_found(self, db, seed, other_branch, partial_sale):
        with pytest.raises(AppException) as exc_info:
            sales_service.get_sale(db, other_branch.branch.id, partial_sale.id)

        assert exc_info.value.error_type == ErrorType.NOT_FOUND
        assert sales_service.get_sale(db, seed.branch.id, partial_sale.id) is partial_sale

    def test_update_of_another_branch_is_not_found(self, db, seed, other_branch, partial_sale):
        with pytest.raises(AppException):
            sales_service.update_sale(db, other_branch.branch.id, partial_sale.id, {"notes": "Başka şube"})

        db.refresh(partial_sale)
        assert partial_sale.notes is None

    def test_only_due_date_and_notes_are_editable(self, db, seed, partial_sale):
        with pytest.raises(AppException) as exc_info:
            sales_service.update_sale(db, seed.branch.id, partial_sale.id, {"net_amount": Decimal("1")})

        assert exc_info.value.error_type == ErrorType.VALIDATION

        updated = sales_service.update_sale(db, seed.branch.id, partial_sale.id, {"due_date": date(2030, 1, 1)})
        assert updated.due_date == date(2030, 1, 1)


class TestDeleteSale:
    """Tests for removing a sale and reversing its effects."""

    def test_reverses_stock_balance_and_drawer(self, db, seed, partial_sale):
        assert partial_sale.credit_amount == Decimal("240.00")
        db.refresh(seed.customer)
        assert seed.customer.current_balance == Decimal("240.00")

        sales_service.delete_sale(db, seed.branch.id, partial_sale.id)

        assert count(db, Sale) == 0
        assert count(db, SaleItem) == 0
        assert count(db, CashMovement) == 0
        db.refresh(seed.headphones)
        db.refresh(seed.tea)
        db.refresh(seed.customer)
        assert seed.headphones.stock_quantity == 10
        assert seed.tea.stock_quantity == 100
        assert seed.customer.current_balance == Decimal("0.00")
        assert cash_drawer.daily_summary(db, seed.branch.id).total_sales == Decimal("0")

    def test_cash_sale_leaves_balance_alone(self, db, seed):
        sale = commit_sale(
            db, seed.cashier, build_cart(db, [CheckoutLine(seed.tea.id, 3)]), PaymentRequest(PaymentType.CASH)
        )

        sales_service.delete_sale(db, seed.branch.id, sale.id)

        db.refresh(seed.tea)
        db.refresh(seed.customer)
        assert seed.tea.stock_quantity == 100
        assert seed.customer.current_balance == Decimal("0.00")

    def test_other_branch_cannot_delete(self, db, seed, other_branch, partial_sale):
        with pytest.raises(AppException) as exc_info:
            sales_service.delete_sale(db, other_branch.branch.id, partial_sale.id)

        assert exc_info.value.error_type == ErrorType.NOT_FOUND
        assert count(db, Sale) == 1

    def test_failure_rolls_everything_back(self, db, seed, partial_sale):
        with patch(
            "retailpos.services.sales.subtract_from_balance",
            side_effect=OperationalError("UPDATE", {}, Exception("disk full")),
        ):
            with pytest.raises(AppException) as exc_info:
                sales_service.delete_sale(db, seed.branch.id, partial_sale.id)

        assert exc_info.value.error_type == ErrorType.DATABASE
        assert count(db, Sale) == 1
        assert count(db, CashMovement) == 1
        db.refresh(seed.headphones)
        db.refresh(seed.customer)
        assert seed.headphones.stock_quantity == 8
        assert seed.customer.current_balance == Decimal("240.00")
