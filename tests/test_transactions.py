from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from categories import parse_category
from database import Base
from errors import LedgerValidationError, NotFoundError
from models import CostType, ExpenseCategory, TransactionType
from periods import PeriodKey
from schemas import TransactionIn
from services import LedgerSummaryService, TransactionService

USER = "user-1"


def _session() -> Session:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    return Session(engine)


def test_expense_defaults_to_variable_cost():
    data = TransactionIn(
        description="Groceries",
        amount_cents=15_000,
        type=TransactionType.expense,
        category="food",
        date=date(2024, 3, 15),
    )
    assert data.cost_type == CostType.variable
    assert data.category == ExpenseCategory.food


def test_invalid_entries_are_rejected():
    base = {
        "description": "Thing",
        "amount_cents": 1_000,
        "type": TransactionType.expense,
        "category": "Other",
        "date": date(2024, 3, 1),
    }
    with pytest.raises(ValidationError):
        TransactionIn(**{**base, "amount_cents": 0})
    with pytest.raises(ValidationError):
        TransactionIn(**{**base, "category": "Groceries"})
    with pytest.raises(ValidationError):
        TransactionIn(**{**base, "installments_current": 4, "installments_total": 3})
    with pytest.raises(ValidationError):
        TransactionIn(**{**base, "installments_current": 1})
    with pytest.raises(ValidationError):
        TransactionIn(
            **{**base, "type": TransactionType.income, "cost_type": CostType.fixed}
        )


def test_parse_category_accepts_case_and_single_typo():
    assert parse_category("HOUSING") == ExpenseCategory.housing
    assert parse_category(" transprt ") == ExpenseCategory.transport
    with pytest.raises(LedgerValidationError):
        parse_category("Groceries")
    with pytest.raises(LedgerValidationError):
        parse_category("")


def test_repeat_months_creates_monthly_series_snapped_to_month_end():
    with _session() as session:
        txns = TransactionService(session, USER).create(
            TransactionIn(
                description="Streaming",
                amount_cents=3_990,
                type=TransactionType.expense,
                category="Leisure",
                cost_type=CostType.fixed,
                date=date(2024, 1, 31),
                repeat_months=4,
            )
        )
        assert [t.date for t in txns] == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
        ]
        assert {t.cost_type for t in txns} == {CostType.fixed}


def test_installments_are_stored_but_do_not_affect_totals():
    with _session() as session:
        service = TransactionService(session, USER)
        service.create(
            TransactionIn(
                description="Laptop",
                amount_cents=50_000,
                type=TransactionType.expense,
                category="Electronics",
                date=date(2024, 3, 20),
                installments_current=2,
                installments_total=10,
            )
        )
        stored = service.list_for_period(PeriodKey(2024, 3))
        assert stored[0].installments_current == 2
        assert stored[0].installments_total == 10

        summary = LedgerSummaryService(session, USER).summary(PeriodKey(2024, 3))
        assert summary.expense_cents == 50_000
        assert summary.variable_cents == 50_000


def test_delete_only_touches_own_transactions():
    with _session() as session:
        mine = TransactionService(session, USER).create(
            TransactionIn(
                description="Pharmacy",
                amount_cents=2_500,
                type=TransactionType.expense,
                category="Health",
                date=date(2024, 3, 2),
            )
        )[0]

        with pytest.raises(NotFoundError):
            TransactionService(session, "intruder").delete(mine.id)

        TransactionService(session, USER).delete(mine.id)
        assert TransactionService(session, USER).list_for_period(PeriodKey(2024, 3)) == []


def test_summary_service_reads_only_the_requested_month():
    with _session() as session:
        service = TransactionService(session, USER)
        for day, amount in ((date(2024, 2, 29), 1_000), (date(2024, 3, 1), 2_000), (date(2024, 3, 31), 3_000)):
            service.create(
                TransactionIn(
                    description="Coffee",
                    amount_cents=amount,
                    type=TransactionType.expense,
                    category="Food",
                    date=day,
                )
            )

        summary = LedgerSummaryService(session, USER).summary(PeriodKey(2024, 3))
        assert summary.expense_cents == 5_000
