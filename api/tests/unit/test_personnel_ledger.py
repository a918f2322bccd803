from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from retailpos.errors import ErrorType
from retailpos.exceptions import AppException
from retailpos.models import Personnel
from retailpos.services import personnel_ledger


@pytest.fixture
def person(db, seed):
    person = Personnel(branch_id=seed.branch.id, full_name="Mehmet Kaya", salary=Decimal("20000"))
    db.add(person)
    db.commit()
    return person


class TestSplitAmount:
    """Tests for mapping transaction types onto ledger sides."""

    @pytest.mark.parametrize(
        "transaction_type, expected",
        [
            ("hakedis", (Decimal("0"), Decimal("100.00"))),
            ("avans", (Decimal("100.00"), Decimal("0"))),
            ("odeme", (Decimal("100.00"), Decimal("0"))),
            ("kesinti", (Decimal("100.00"), Decimal("0"))),
        ],
    )
    def test_sides(self, transaction_type, expected):
        assert personnel_ledger.split_amount(transaction_type, Decimal("100")) == expected

    def test_unknown_type_rejected(self):
        with pytest.raises(AppException) as exc_info:
            personnel_ledger.split_amount("prim", Decimal("100"))

        assert exc_info.value.error_type == ErrorType.VALIDATION

    def test_amount_must_be_positive(self):
        with pytest.raises(AppException):
            personnel_ledger.split_amount("avans", Decimal("0"))


class TestLedger:
    """Tests for recording transactions and deriving balances."""

    def test_running_balance_and_summary(self, db, seed, person):
        start = date.today() - timedelta(days=10)
        personnel_ledger.create_transaction(
            db, seed.admin, person.id, "hakedis", Decimal("10000"), "Ocak maaşı", transaction_date=start
        )
        personnel_ledger.create_transaction(
            db, seed.admin, person.id, "avans", Decimal("2000"), "Avans",
            transaction_date=start + timedelta(days=1),
        )
        personnel_ledger.create_transaction(
            db, seed.admin, person.id, "kesinti", Decimal("500"), "Avans kesintisi",
            transaction_date=start + timedelta(days=2),
        )

        transactions = personnel_ledger.list_transactions(db, person.id)
        balances = [balance for _, balance in personnel_ledger.running_balances(transactions)]
        summary = personnel_ledger.summarize(transactions)

        assert balances == [Decimal("10000.00"), Decimal("8000.00"), Decimal("7500.00")]
        assert summary.balance == Decimal("7500.00")
        assert summary.total_advances == Decimal("2000.00")
        assert summary.remaining_advance == Decimal("1500.00")

    def test_transaction_number_uses_type_prefix(self, db, seed, person):
        first = personnel_ledger.create_transaction(db, seed.admin, person.id, "avans", Decimal("100"), "Avans")
        second = personnel_ledger.create_transaction(db, seed.admin, person.id, "avans", Decimal("100"), "Avans")
        payment = personnel_ledger.create_transaction(db, seed.admin, person.id, "odeme", Decimal("100"), "Ödeme")

        stem = f"{date.today():%Y%m%d}"
        assert first.transaction_number == f"AVANS-{stem}-000001"
        assert second.transaction_number == f"AVANS-{stem}-000002"
        assert payment.transaction_number == f"ODEME-{stem}-000001"

    def test_delete_transaction(self, db, seed, person):
        transaction = personnel_ledger.create_transaction(
            db, seed.admin, person.id, "hakedis", Decimal("100"), "Prim"
        )

        personnel_ledger.delete_transaction(db, seed.branch.id, transaction.id)

        assert personnel_ledger.list_transactions(db, person.id) == []

    def test_unknown_personnel(self, db, seed):
        with pytest.raises(AppException) as exc_info:
            personnel_ledger.create_transaction(db, seed.admin, 9999, "avans", Decimal("100"), "Avans")

        assert exc_info.value.error_type == ErrorType.NOT_FOUND

    def test_personnel_of_another_branch_is_not_found(self, db, seed, person, other_branch):
        with pytest.raises(AppException) as exc_info:
            personnel_ledger.create_transaction(
                db, other_branch.manager, person.id, "avans", Decimal("100"), "Avans"
            )

        assert exc_info.value.error_type == ErrorType.NOT_FOUND
        assert personnel_ledger.list_transactions(db, person.id) == []

    def test_transaction_of_another_branch_cannot_be_deleted(self, db, seed, person, other_branch):
        transaction = personnel_ledger.create_transaction(
            db, seed.admin, person.id, "hakedis", Decimal("100"), "Prim"
        )

        with pytest.raises(AppException) as exc_info:
            personnel_ledger.delete_transaction(db, other_branch.branch.id, transaction.id)

        assert exc_info.value.error_type == ErrorType.NOT_FOUND
        assert personnel_ledger.list_transactions(db, person.id) == [transaction]

    def test_running_balance_sorts_by_date(self):
        today = date.today()
        rows = [
            SimpleNamespace(id=2, transaction_date=today, debit_amount=Decimal("50"), credit_amount=Decimal("0")),
            SimpleNamespace(
                id=1,
                transaction_date=today - timedelta(days=1),
                debit_amount=Decimal("0"),
                credit_amount=Decimal("200"),
            ),
        ]

        result = personnel_ledger.running_balances(rows)

        assert [row.id for row, _ in result] == [1, 2]
        assert result[-1][1] == Decimal("150.00")
