from dataclasses import dataclass
from datetime import date
from typing import Optional

import pytest

from aggregation import fixed_expense_checklist, summarize_period
from models import CostType, ExpenseCategory, TransactionType
from periods import PeriodKey

MARCH = PeriodKey(2024, 3)


@dataclass
class Entry:
    description: str
    amount_cents: int
    type: TransactionType
    category: ExpenseCategory
    cost_type: Optional[CostType]
    date: date


def _income(amount: int, day: date, description: str = "Salary") -> Entry:
    return Entry(description, amount, TransactionType.income, ExpenseCategory.salary, None, day)


def _expense(
    amount: int,
    day: date,
    cost_type: CostType,
    category: ExpenseCategory,
    description: str = "Expense",
) -> Entry:
    return Entry(description, amount, TransactionType.expense, category, cost_type, day)


def _march_ledger() -> list[Entry]:
    return [
        _income(850_000, date(2024, 3, 5)),
        _expense(220_000, date(2024, 3, 10), CostType.fixed, ExpenseCategory.housing, "Rent"),
        _expense(45_000, date(2024, 3, 12), CostType.fixed, ExpenseCategory.services, "Internet"),
        _expense(150_000, date(2024, 3, 15), CostType.variable, ExpenseCategory.food, "Groceries"),
    ]


def test_march_summary_totals_and_split():
    summary = summarize_period(_march_ledger(), MARCH)

    assert summary.income_cents == 850_000
    assert summary.expense_cents == 415_000
    assert summary.balance_cents == 435_000
    assert summary.fixed_cents == 265_000
    assert summary.variable_cents == 150_000
    assert summary.fixed_percent == pytest.approx(63.855, abs=0.01)
    assert summary.variable_percent == pytest.approx(36.145, abs=0.01)
    assert summary.top_category.category == ExpenseCategory.housing
    assert [c.category for c in summary.categories] == [
        ExpenseCategory.housing,
        ExpenseCategory.food,
        ExpenseCategory.services,
    ]
    assert sum(c.percent for c in summary.categories) == pytest.approx(100.0)


def test_entries_outside_the_month_are_ignored():
    ledger = _march_ledger() + [
        _expense(99_000, date(2024, 2, 29), CostType.variable, ExpenseCategory.leisure),
        _income(10_000, date(2024, 4, 1)),
    ]

    summary = summarize_period(ledger, MARCH)

    assert summary.income_cents == 850_000
    assert summary.expense_cents == 415_000


def test_month_without_expenses_has_zero_percentages():
    summary = summarize_period([_income(100_000, date(2024, 3, 1))], MARCH)

    assert summary.expense_cents == 0
    assert summary.fixed_percent == 0.0
    assert summary.variable_percent == 0.0
    assert summary.top_category is None
    assert summary.as_dict()["top_category"] is None


def test_balance_can_go_negative():
    summary = summarize_period(
        [_expense(5_000, date(2024, 3, 3), CostType.variable, ExpenseCategory.food)], MARCH
    )
    assert summary.balance_cents == -5_000


def test_summary_is_repeatable_for_identical_input():
    ledger = _march_ledger()
    assert summarize_period(ledger, MARCH) == summarize_period(ledger, MARCH)
    assert summarize_period(ledger, MARCH) == summarize_period(list(reversed(ledger)), MARCH)


def test_fixed_expense_checklist_marks_paid_bills():
    previous = [
        _expense(220_000, date(2024, 2, 10), CostType.fixed, ExpenseCategory.housing, "Rent"),
        _expense(45_000, date(2024, 2, 12), CostType.fixed, ExpenseCategory.services, "Internet"),
        _expense(45_000, date(2024, 2, 13), CostType.fixed, ExpenseCategory.services, "internet "),
        _expense(9_000, date(2024, 2, 14), CostType.variable, ExpenseCategory.food, "Pizza"),
        _income(850_000, date(2024, 2, 5)),
    ]
    current = [
        _expense(220_000, date(2024, 3, 10), CostType.fixed, ExpenseCategory.housing, " rent"),
    ]

    checklist = fixed_expense_checklist(previous, current)

    assert [(i.description, i.paid) for i in checklist] == [
        ("Rent", True),
        ("Internet", False),
    ]
