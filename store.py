from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from errors import NotFoundError, StoreError
from models import (
    DailyLog,
    Habit,
    HabitLog,
    RecurringExpense,
    Transaction,
)

logger = logging.getLogger(__name__)


class LedgerStore:
    """Read/write access to the ledger tables for one session.

    Every mutation commits on its own; a failed write is rolled back and
    surfaced as ``StoreError`` with the record it concerned.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _commit(self, message: str, **context: Optional[int]) -> None:
        try:
            self.session.flush()
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning(f"store_write_failed: {message} error={exc}")
            raise StoreError(message, **context) from exc

    # --- obligations ---

    def list_active_obligations(self, user_id: str) -> list[RecurringExpense]:
        stmt = (
            select(RecurringExpense)
            .where(
                RecurringExpense.user_id == user_id,
                RecurringExpense.active.is_(True),
            )
            .order_by(RecurringExpense.day_of_month, RecurringExpense.id)
        )
        try:
            return list(self.session.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to list obligations for {user_id}") from exc

    def get_obligation(self, user_id: str, obligation_id: int) -> RecurringExpense:
        obligation = self.session.get(RecurringExpense, obligation_id)
        if not obligation or obligation.user_id != user_id:
            raise NotFoundError("Recurring expense not found")
        return obligation

    def add_obligation(self, obligation: RecurringExpense) -> RecurringExpense:
        self.session.add(obligation)
        self._commit("Failed to save recurring expense")
        return obligation

    def update_obligation_marker(self, obligation_id: int, marker: date) -> None:
        obligation = self.session.get(RecurringExpense, obligation_id)
        if not obligation:
            raise NotFoundError("Recurring expense not found")
        obligation.last_generated = marker
        self._commit(
            f"Failed to update marker of obligation {obligation_id}",
            obligation_id=obligation_id,
        )

    def deactivate_obligation(self, user_id: str, obligation_id: int) -> None:
        obligation = self.get_obligation(user_id, obligation_id)
        obligation.active = False
        self._commit(
            f"Failed to deactivate obligation {obligation_id}",
            obligation_id=obligation_id,
        )

    def find_generated(
        self, user_id: str, obligation_id: int, period: str
    ) -> Optional[int]:
        stmt = (
            select(Transaction.id)
            .where(
                Transaction.user_id == user_id,
                Transaction.origin_obligation_id == obligation_id,
                Transaction.origin_period == period,
            )
            .limit(1)
        )
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Failed to look up obligation {obligation_id} for {period}",
                obligation_id=obligation_id,
            ) from exc

    def materialize_occurrence(
        self, obligation: RecurringExpense, fields: dict[str, Any], marker: date
    ) -> Optional[int]:
        """Insert the generated transaction and stamp the marker in one commit.

        Returns the new transaction id, or ``None`` when a row for this
        obligation and month already exists. In that case only the marker is
        stamped.
        """
        obligation_id = obligation.id
        user_id = obligation.user_id
        period = fields["origin_period"]
        if self.find_generated(user_id, obligation_id, period) is not None:
            self._stamp_marker(obligation, marker)
            return None

        txn = Transaction(user_id=user_id, **fields)
        self.session.add(txn)
        obligation.last_generated = marker
        try:
            self.session.flush()
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if self.find_generated(user_id, obligation_id, period) is None:
                logger.warning(
                    f"store_write_failed: obligation={obligation_id} "
                    f"period={period} error={exc}"
                )
                raise StoreError(
                    f"Failed to materialize obligation {obligation_id} for {marker}",
                    obligation_id=obligation_id,
                ) from exc
            logger.info(
                f"reconcile_overlap: obligation={obligation_id} period={period}"
            )
            self._stamp_marker(obligation, marker)
            return None
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning(
                f"store_write_failed: obligation={obligation_id} "
                f"period={period} error={exc}"
            )
            raise StoreError(
                f"Failed to materialize obligation {obligation_id} for {marker}",
                obligation_id=obligation_id,
            ) from exc
        return txn.id

    def _stamp_marker(self, obligation: RecurringExpense, marker: date) -> None:
        obligation_id = obligation.id
        obligation.last_generated = marker
        self._commit(
            f"Failed to update marker of obligation {obligation_id}",
            obligation_id=obligation_id,
        )

    # --- transactions ---

    def insert_transaction(self, user_id: str, fields: dict[str, Any]) -> int:
        txn = Transaction(user_id=user_id, **fields)
        self.session.add(txn)
        self._commit(f"Failed to insert transaction for {user_id}")
        return txn.id

    def insert_transactions(
        self, user_id: str, rows: list[dict[str, Any]]
    ) -> list[Transaction]:
        txns = [Transaction(user_id=user_id, **fields) for fields in rows]
        self.session.add_all(txns)
        self._commit(f"Failed to insert {len(txns)} transactions for {user_id}")
        return txns

    def get_transaction(self, user_id: str, transaction_id: int) -> Transaction:
        txn = self.session.get(Transaction, transaction_id)
        if not txn or txn.user_id != user_id:
            raise NotFoundError("Transaction not found")
        return txn

    def list_transactions(
        self, user_id: str, start: date, end: date
    ) -> list[Transaction]:
        stmt = (
            select(Transaction)
            .where(
                Transaction.user_id == user_id,
                Transaction.date.between(start, end),
            )
            .order_by(Transaction.date.desc(), Transaction.id.desc())
        )
        try:
            return list(self.session.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Failed to list transactions for {user_id} {start}..{end}"
            ) from exc

    def delete_transaction(self, user_id: str, transaction_id: int) -> None:
        txn = self.get_transaction(user_id, transaction_id)
        self.session.delete(txn)
        self._commit(
            f"Failed to delete transaction {transaction_id}",
            transaction_id=transaction_id,
        )

    # --- habits ---

    def add_habit(self, habit: Habit) -> Habit:
        self.session.add(habit)
        self._commit(f"Failed to save habit for {habit.user_id}")
        return habit

    def deactivate_habit(self, habit: Habit) -> None:
        habit_id = habit.id
        habit.is_active = False
        self._commit(f"Failed to deactivate habit {habit_id}")

    def completed_habit_ids(self, user_id: str, day: date) -> set[int]:
        stmt = (
            select(HabitLog.habit_id)
            .join(Habit, Habit.id == HabitLog.habit_id)
            .where(
                Habit.user_id == user_id,
                Habit.is_active.is_(True),
                HabitLog.date == day,
            )
        )
        try:
            return set(self.session.scalars(stmt).all())
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to load habit logs for {day}") from exc

    def set_habit_done(self, habit_id: int, day: date, done: bool) -> None:
        existing = self.session.scalar(
            select(HabitLog).where(HabitLog.habit_id == habit_id, HabitLog.date == day)
        )
        if done and existing is None:
            self.session.add(HabitLog(habit_id=habit_id, date=day))
        elif not done and existing is not None:
            self.session.delete(existing)
        self._commit(f"Failed to update habit {habit_id} for {day}")

    # --- daily logs ---

    def get_daily_log(self, user_id: str, day: date) -> Optional[DailyLog]:
        return self.session.scalar(
            select(DailyLog).where(DailyLog.user_id == user_id, DailyLog.date == day)
        )

    def upsert_daily_log(
        self, user_id: str, day: date, values: dict[str, Any]
    ) -> DailyLog:
        log = self.get_daily_log(user_id, day)
        if log is None:
            log = DailyLog(user_id=user_id, date=day)
            self.session.add(log)
        for field, value in values.items():
            setattr(log, field, value)
        self._commit(f"Failed to save daily log for {user_id} on {day}")
        return log
