"""Month-scoped ledger summaries.

Everything here is a pure function of the transactions passed in: no session,
no clock. Callers fetch the month (and, for the fixed bill checklist, the
month before) and hand the rows over.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Protocol

from models import CostType, ExpenseCategory, TransactionType
from periods import PeriodKey


class LedgerEntry(Protocol):
    description: str
    amount_cents: int
    type: TransactionType
    category: ExpenseCategory
    cost_type: Optional[CostType]
    date: date


@dataclass(frozen=True)
class CategoryTotal:
    category: ExpenseCategory
    amount_cents: int
    percent: float


@dataclass(frozen=True)
class PeriodSummary:
    period: PeriodKey
    income_cents: int = 0
    expense_cents: int = 0
    balance_cents: int = 0
    fixed_cents: int = 0
    variable_cents: int = 0
    fixed_percent: float = 0.0
    variable_percent: float = 0.0
    categories: tuple[CategoryTotal, ...] = field(default_factory=tuple)

    @property
    def top_category(self) -> Optional[CategoryTotal]:
        return self.categories[0] if self.categories else None

    def as_dict(self) -> dict[str, object]:
        top = self.top_category
        return {
            "period": str(self.period),
            "income_cents": self.income_cents,
            "expense_cents": self.expense_cents,
            "balance_cents": self.balance_cents,
            "fixed_cents": self.fixed_cents,
            "variable_cents": self.variable_cents,
            "fixed_percent": self.fixed_percent,
            "variable_percent": self.variable_percent,
            "top_category": top.category.value if top else None,
            "categories": [
                {
                    "category": c.category.value,
                    "amount_cents": c.amount_cents,
                    "percent": c.percent,
                }
                for c in self.categories
            ],
        }


def _percent(part: int, total: int) -> float:
    return (part / total * 100) if total > 0 else 0.0


def summarize_period(
    transactions: Iterable[LedgerEntry], period: PeriodKey
) -> PeriodSummary:
    income = 0
    expense = 0
    fixed = 0
    variable = 0
    by_category: dict[ExpenseCategory, int] = {}

    for txn in transactions:
        if not period.contains(txn.date):
            continue
        if txn.type == TransactionType.income:
            income += txn.amount_cents
            continue
        expense += txn.amount_cents
        if txn.cost_type == CostType.fixed:
            fixed += txn.amount_cents
        else:
            variable += txn.amount_cents
        by_category[txn.category] = by_category.get(txn.category, 0) + txn.amount_cents

    # Ties fall back to enum declaration order so equal inputs sort the same.
    order = {category: idx for idx, category in enumerate(ExpenseCategory)}
    ranked = sorted(by_category.items(), key=lambda kv: (-kv[1], order[kv[0]]))
    categories = tuple(
        CategoryTotal(category=cat, amount_cents=amount, percent=_percent(amount, expense))
        for cat, amount in ranked
    )
    return PeriodSummary(
        period=period,
        income_cents=income,
        expense_cents=expense,
        balance_cents=income - expense,
        fixed_cents=fixed,
        variable_cents=variable,
        fixed_percent=_percent(fixed, expense),
        variable_percent=_percent(variable, expense),
        categories=categories,
    )


@dataclass(frozen=True)
class ExpectedExpense:
    description: str
    paid: bool


def _normalize(text: str) -> str:
    return (text or "").strip().lower()


def fixed_expense_checklist(
    previous: Iterable[LedgerEntry], current: Iterable[LedgerEntry]
) -> list[ExpectedExpense]:
    """Last month's fixed bills, marked paid once this month has a match."""
    seen: dict[str, str] = {}
    for txn in previous:
        if txn.type != TransactionType.expense or txn.cost_type != CostType.fixed:
            continue
        key = _normalize(txn.description)
        if key and key not in seen:
            seen[key] = txn.description.strip()

    paid_keys = {_normalize(txn.description) for txn in current}
    return [
        ExpectedExpense(description=name, paid=key in paid_keys)
        for key, name in seen.items()
    ]
