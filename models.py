import datetime as dt
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base
from scores import DietAdherence, MoodScore, WorkoutType


class TransactionType(str, Enum):
    income = "income"
    expense = "expense"


class CostType(str, Enum):
    fixed = "fixed"
    variable = "variable"


class ExpenseCategory(str, Enum):
    housing = "Housing"
    food = "Food"
    transport = "Transport"
    leisure = "Leisure"
    health = "Health"
    services = "Services"
    electronics = "Electronics"
    salary = "Salary"
    investment = "Investment"
    other = "Other"


class MonthDayPolicy(str, Enum):
    snap_to_end = "snap_to_end"
    skip = "skip"


def _values_enum(enum_cls: type[Enum], name: str) -> SAEnum:
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda cls: [member.value for member in cls],
    )


CATEGORY_ENUM = _values_enum(ExpenseCategory, "expensecategory")


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType), nullable=False
    )
    category: Mapped[ExpenseCategory] = mapped_column(CATEGORY_ENUM, nullable=False)
    cost_type: Mapped[Optional[CostType]] = mapped_column(SAEnum(CostType))
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    installments_current: Mapped[Optional[int]] = mapped_column(Integer)
    installments_total: Mapped[Optional[int]] = mapped_column(Integer)
    origin_obligation_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("recurring_expenses.id")
    )
    origin_period: Mapped[Optional[str]] = mapped_column(String(7))

    origin_obligation: Mapped[Optional["RecurringExpense"]] = relationship(
        "RecurringExpense", back_populates="transactions"
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "origin_obligation_id",
            "origin_period",
            name="uq_txn_origin_period",
        ),
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_user_type_date", "user_id", "type", "date"),
        CheckConstraint("amount_cents > 0", name="ck_transactions_amount_positive"),
    )


class RecurringExpense(Base, TimestampMixin):
    __tablename__ = "recurring_expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[ExpenseCategory] = mapped_column(CATEGORY_ENUM, nullable=False)
    day_of_month: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_generated: Mapped[Optional[dt.date]] = mapped_column(Date)
    month_day_policy: Mapped[MonthDayPolicy] = mapped_column(
        SAEnum(MonthDayPolicy),
        default=MonthDayPolicy.snap_to_end,
        nullable=False,
    )

    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction", back_populates="origin_obligation"
    )

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_recurring_amount_positive"),
        CheckConstraint(
            "day_of_month BETWEEN 1 AND 31", name="ck_recurring_day_of_month"
        ),
        Index("ix_recurring_user_active", "user_id", "active"),
    )


class Habit(Base, TimestampMixin):
    __tablename__ = "habits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    logs: Mapped[list["HabitLog"]] = relationship(
        "HabitLog", back_populates="habit", cascade="all, delete-orphan"
    )


class HabitLog(Base):
    __tablename__ = "habit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    habit_id: Mapped[int] = mapped_column(ForeignKey("habits.id"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    habit: Mapped["Habit"] = relationship("Habit", back_populates="logs")

    __table_args__ = (
        UniqueConstraint("habit_id", "date", name="uq_habit_log_day"),
    )


class DailyLog(Base, TimestampMixin):
    __tablename__ = "daily_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    weight_kg: Mapped[Optional[float]] = mapped_column(Float)
    sleep: Mapped[Optional[MoodScore]] = mapped_column(SAEnum(MoodScore))
    libido: Mapped[Optional[MoodScore]] = mapped_column(SAEnum(MoodScore))
    diet: Mapped[Optional[DietAdherence]] = mapped_column(SAEnum(DietAdherence))
    workout_type: Mapped[Optional[WorkoutType]] = mapped_column(SAEnum(WorkoutType))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_log_day"),)
