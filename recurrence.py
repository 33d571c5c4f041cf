from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from errors import PartialReconciliationError, StoreError
from models import CostType, MonthDayPolicy, RecurringExpense, TransactionType
from periods import PeriodKey, local_today
from store import LedgerStore

logger = logging.getLogger(__name__)


def resolve_occurrence_date(
    period: PeriodKey, day_of_month: int, policy: MonthDayPolicy
) -> Optional[date]:
    if not 1 <= day_of_month <= 31:
        raise ValueError(f"Invalid day of month: {day_of_month}")
    dim = period.days
    if day_of_month > dim:
        if policy == MonthDayPolicy.skip:
            return None
        return date(period.year, period.month, dim)
    return date(period.year, period.month, day_of_month)


def generated_period(obligation: RecurringExpense) -> Optional[PeriodKey]:
    if obligation.last_generated is None:
        return None
    return PeriodKey.of(obligation.last_generated)


@dataclass(frozen=True)
class ReconciliationFailure:
    obligation_id: int
    description: str
    error: str


@dataclass
class ReconciliationResult:
    period: PeriodKey
    generated: int = 0
    already_current: int = 0
    not_applicable: int = 0
    transaction_ids: list[int] = field(default_factory=list)
    failures: list[ReconciliationFailure] = field(default_factory=list)

    @property
    def status(self) -> str:
        if not self.failures:
            return "ok"
        if self.generated:
            return "partial"
        return "failed"

    def raise_for_failures(self) -> None:
        if self.failures:
            raise PartialReconciliationError(self)

    def as_dict(self) -> dict[str, object]:
        return {
            "period": str(self.period),
            "status": self.status,
            "generated": self.generated,
            "already_current": self.already_current,
            "not_applicable": self.not_applicable,
            "failed": len(self.failures),
            "transaction_ids": list(self.transaction_ids),
            "failures": [
                {
                    "obligation_id": f.obligation_id,
                    "description": f.description,
                    "error": f.error,
                }
                for f in self.failures
            ],
        }


class ObligationReconciler:
    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def reconcile(
        self, user_id: str, today: Optional[date] = None
    ) -> ReconciliationResult:
        today = today or local_today()
        period = PeriodKey.of(today)
        result = ReconciliationResult(period=period)

        for obligation in self.store.list_active_obligations(user_id):
            done_period = generated_period(obligation)
            if done_period is not None and done_period >= period:
                result.already_current += 1
                continue

            occurrence = resolve_occurrence_date(
                period, obligation.day_of_month, obligation.month_day_policy
            )
            if occurrence is None:
                result.not_applicable += 1
                continue

            obligation_id = obligation.id
            description = obligation.description
            fields = {
                "description": description,
                "amount_cents": obligation.amount_cents,
                "type": TransactionType.expense,
                "category": obligation.category,
                "cost_type": CostType.fixed,
                "date": occurrence,
                "origin_obligation_id": obligation_id,
                "origin_period": str(period),
            }
            try:
                txn_id = self.store.materialize_occurrence(
                    obligation, fields, occurrence
                )
            except StoreError as exc:
                result.failures.append(
                    ReconciliationFailure(
                        obligation_id=obligation_id,
                        description=description,
                        error=str(exc),
                    )
                )
                continue
            if txn_id is None:
                result.already_current += 1
                continue
            result.generated += 1
            result.transaction_ids.append(txn_id)

        logger.info(
            f"reconcile_run: user={user_id} period={period} "
            f"generated={result.generated} already_current={result.already_current} "
            f"not_applicable={result.not_applicable} failed={len(result.failures)}"
        )
        return result
