from datetime import date

import pytest

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.models import Sale
from retailpos.services import stock
from retailpos.services.numbering import next_document_number


class TestStock:
    """Tests for single-statement stock updates."""

    def test_strict_decrement(self, db, seed):
        assert stock.decrement_stock(db, seed.tea.id, 30, allow_oversell=False) == 70

    def test_strict_decrement_rejects_shortage(self, db, seed):
        with pytest.raises(AppException) as exc_info:
            stock.decrement_stock(db, seed.bread.id, 6, allow_oversell=False)

        assert exc_info.value.error_type == ErrorType.INSUFFICIENT_STOCK
        assert "Ekmek" in exc_info.value.message

    def test_clamped_decrement(self, db, seed):
        assert stock.decrement_stock(db, seed.bread.id, 6, allow_oversell=True) == 0

    def test_unknown_product(self, db, seed):
        with pytest.raises(AppException) as exc_info:
            stock.decrement_stock(db, 9999, 1, allow_oversell=True)

        assert exc_info.value.error_type == ErrorType.NOT_FOUND

    def test_receive_stock(self, db, seed):
        assert stock.receive_stock(db, seed.bread.id, 20) == 25

    def test_receive_rejects_zero(self, db, seed):
        with pytest.raises(AppException):
            stock.receive_stock(db, seed.bread.id, 0)

    def test_low_stock(self, db, seed):
        assert [product.name for product in stock.low_stock_products(db)] == ["Ekmek"]


class TestDocumentNumbers:
    def test_first_number_of_the_day(self, db, seed):
        assert next_document_number(db, Sale.sale_number, "SAT", date(2024, 3, 5)) == "SAT-20240305-000001"
