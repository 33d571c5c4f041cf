import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from categories import parse_category
from models import CostType, ExpenseCategory, MonthDayPolicy, TransactionType
from scores import DietAdherence, MoodScore, WorkoutType


class TransactionIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str = Field(..., min_length=1, max_length=200)
    amount_cents: int = Field(..., gt=0)
    type: TransactionType
    category: ExpenseCategory
    cost_type: Optional[CostType] = None
    date: dt.date
    installments_current: Optional[int] = Field(default=None, ge=1)
    installments_total: Optional[int] = Field(default=None, ge=1)
    repeat_months: Optional[int] = Field(default=None, ge=1, le=120)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        return parse_category(value)

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description must not be blank")
        return value

    @model_validator(mode="after")
    def _check_flow_fields(self) -> "TransactionIn":
        if self.type == TransactionType.income:
            if self.cost_type is not None:
                raise ValueError("Income entries do not carry a cost type")
            if self.installments_current or self.installments_total:
                raise ValueError("Only expenses can be paid in installments")
            if self.repeat_months:
                raise ValueError("Only expenses can be repeated monthly")
        elif self.cost_type is None:
            self.cost_type = CostType.variable

        has_current = self.installments_current is not None
        has_total = self.installments_total is not None
        if has_current != has_total:
            raise ValueError("Installments need both current and total")
        if has_current and self.installments_current > self.installments_total:
            raise ValueError("Current installment cannot exceed the total")
        if has_current and self.repeat_months:
            raise ValueError("An entry is either an installment or a repeat, not both")
        return self


class ObligationIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str = Field(..., min_length=1, max_length=200)
    amount_cents: int = Field(..., gt=0)
    category: ExpenseCategory = ExpenseCategory.housing
    day_of_month: int = Field(..., ge=1, le=31)
    month_day_policy: MonthDayPolicy = MonthDayPolicy.snap_to_end

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        return parse_category(value)


class HabitIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=120)


class DailyLogIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    weight_kg: Optional[float] = Field(default=None, gt=0, lt=500)
    sleep: Optional[MoodScore] = None
    libido: Optional[MoodScore] = None
    diet: Optional[DietAdherence] = None
    workout_type: Optional[WorkoutType] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    amount_cents: int
    type: TransactionType
    category: ExpenseCategory
    cost_type: Optional[CostType]
    date: dt.date
    installments_current: Optional[int]
    installments_total: Optional[int]
    origin_obligation_id: Optional[int]


class ObligationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    amount_cents: int
    category: ExpenseCategory
    day_of_month: int
    month_day_policy: MonthDayPolicy
    last_generated: Optional[dt.date]
