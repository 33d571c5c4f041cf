from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from aggregation import (
    ExpectedExpense,
    PeriodSummary,
    fixed_expense_checklist,
    summarize_period,
)
from errors import NotFoundError, StoreError
from models import DailyLog, Habit, RecurringExpense, Transaction
from periods import PeriodKey, add_months
from recurrence import (
    ObligationReconciler,
    ReconciliationResult,
    generated_period,
    resolve_occurrence_date,
)
from schemas import DailyLogIn, HabitIn, ObligationIn, TransactionIn
from store import LedgerStore

logger = logging.getLogger(__name__)


def users_with_active_obligations(session: Session) -> list[str]:
    stmt = (
        select(RecurringExpense.user_id)
        .where(RecurringExpense.active.is_(True))
        .distinct()
        .order_by(RecurringExpense.user_id)
    )
    return list(session.scalars(stmt).all())


class TransactionService:
    def __init__(self, session: Session, user_id: str) -> None:
        self.session = session
        self.user_id = user_id
        self.store = LedgerStore(session)

    def create(self, data: TransactionIn) -> list[Transaction]:
        base: dict[str, Any] = {
            "description": data.description,
            "amount_cents": data.amount_cents,
            "type": data.type,
            "category": data.category,
            "cost_type": data.cost_type,
            "installments_current": data.installments_current,
            "installments_total": data.installments_total,
        }
        months = data.repeat_months or 1
        rows = [
            {**base, "date": add_months(data.date, offset)} for offset in range(months)
        ]
        txns = self.store.insert_transactions(self.user_id, rows)
        if months > 1:
            logger.info(
                f"transaction_series: user={self.user_id} "
                f"description={data.description!r} months={months}"
            )
        return txns

    def get(self, transaction_id: int) -> Transaction:
        return self.store.get_transaction(self.user_id, transaction_id)

    def delete(self, transaction_id: int) -> None:
        self.store.delete_transaction(self.user_id, transaction_id)

    def list_for_period(self, period: PeriodKey) -> list[Transaction]:
        return self.store.list_transactions(self.user_id, period.start, period.end)


class RecurringObligationService:
    def __init__(self, session: Session, user_id: str) -> None:
        self.session = session
        self.user_id = user_id
        self.store = LedgerStore(session)

    def list(self) -> list[RecurringExpense]:
        return self.store.list_active_obligations(self.user_id)

    def get(self, obligation_id: int) -> RecurringExpense:
        return self.store.get_obligation(self.user_id, obligation_id)

    def create(self, data: ObligationIn) -> RecurringExpense:
        obligation = RecurringExpense(
            user_id=self.user_id,
            description=data.description.strip(),
            amount_cents=data.amount_cents,
            category=data.category,
            day_of_month=data.day_of_month,
            month_day_policy=data.month_day_policy,
            active=True,
        )
        return self.store.add_obligation(obligation)

    def deactivate(self, obligation_id: int) -> None:
        self.store.deactivate_obligation(self.user_id, obligation_id)

    def reconcile(self, today: Optional[date] = None) -> ReconciliationResult:
        return ObligationReconciler(self.store).reconcile(self.user_id, today)

    def status_for(self, period: PeriodKey) -> list[dict[str, object]]:
        rows: list[dict[str, object]] = []
        for obligation in self.list():
            occurrence = resolve_occurrence_date(
                period, obligation.day_of_month, obligation.month_day_policy
            )
            rows.append(
                {
                    "obligation": obligation,
                    "generated": generated_period(obligation) == period,
                    "not_applicable": occurrence is None,
                }
            )
        return rows


class LedgerSummaryService:
    def __init__(self, session: Session, user_id: str) -> None:
        self.session = session
        self.user_id = user_id
        self.store = LedgerStore(session)

    def summary(self, period: PeriodKey) -> PeriodSummary:
        txns = self.store.list_transactions(self.user_id, period.start, period.end)
        return summarize_period(txns, period)

    def fixed_expense_checklist(self, period: PeriodKey) -> list[ExpectedExpense]:
        previous = period.previous()
        return fixed_expense_checklist(
            self.store.list_transactions(self.user_id, previous.start, previous.end),
            self.store.list_transactions(self.user_id, period.start, period.end),
        )


class HabitService:
    def __init__(self, session: Session, user_id: str) -> None:
        self.session = session
        self.user_id = user_id
        self.store = LedgerStore(session)

    def list_active(self) -> list[Habit]:
        stmt = (
            select(Habit)
            .where(Habit.user_id == self.user_id, Habit.is_active.is_(True))
            .order_by(Habit.created_at, Habit.id)
        )
        return list(self.session.scalars(stmt).all())

    def get(self, habit_id: int) -> Habit:
        habit = self.session.get(Habit, habit_id)
        if not habit or habit.user_id != self.user_id:
            raise NotFoundError("Habit not found")
        return habit

    def get_active(self, habit_id: int) -> Habit:
        habit = self.get(habit_id)
        if not habit.is_active:
            raise NotFoundError("Habit not found")
        return habit

    def create(self, data: HabitIn) -> Habit:
        habit = Habit(user_id=self.user_id, title=data.title.strip(), is_active=True)
        return self.store.add_habit(habit)

    def deactivate(self, habit_id: int) -> None:
        self.store.deactivate_habit(self.get(habit_id))

    def completed_on(self, day: date) -> set[int]:
        return self.store.completed_habit_ids(self.user_id, day)

    def checklist(self, day: date) -> "HabitChecklist":
        return HabitChecklist(self, day)


class HabitChecklist:
    """Completed habits for one day, updated optimistically.

    ``toggle`` flips the local state first and then writes it. If the write
    fails the local state is reloaded from the store and the error re-raised.
    """

    def __init__(self, habits: HabitService, day: date) -> None:
        self.habits = habits
        self.day = day
        self.completed: set[int] = habits.completed_on(day)

    def reload(self) -> set[int]:
        self.completed = self.habits.completed_on(self.day)
        return self.completed

    def toggle(self, habit_id: int) -> bool:
        self.habits.get_active(habit_id)
        done = habit_id not in self.completed
        if done:
            self.completed.add(habit_id)
        else:
            self.completed.discard(habit_id)
        try:
            self.habits.store.set_habit_done(habit_id, self.day, done)
        except StoreError:
            logger.warning(
                f"habit_toggle_reverted: habit={habit_id} day={self.day} done={done}"
            )
            self.reload()
            raise
        return done


class DailyLogService:
    def __init__(self, session: Session, user_id: str) -> None:
        self.session = session
        self.user_id = user_id
        self.store = LedgerStore(session)

    def get(self, day: date) -> Optional[DailyLog]:
        return self.store.get_daily_log(self.user_id, day)

    def upsert(self, day: date, data: DailyLogIn) -> DailyLog:
        return self.store.upsert_daily_log(self.user_id, day, data.model_dump())

    def history(self, limit: int = 60) -> list[DailyLog]:
        stmt = (
            select(DailyLog)
            .where(DailyLog.user_id == self.user_id)
            .order_by(DailyLog.date.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt).all())
