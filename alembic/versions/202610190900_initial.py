"""initial schema

Revision ID: 202610190900
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "202610190900"
down_revision = None
branch_labels = None
depends_on = None

CATEGORIES = (
    "Housing",
    "Food",
    "Transport",
    "Leisure",
    "Health",
    "Services",
    "Electronics",
    "Salary",
    "Investment",
    "Other",
)

# Named types are created once up front; columns only reference them.
category_type = postgresql.ENUM(*CATEGORIES, name="expensecategory", create_type=False)
month_day_policy_type = postgresql.ENUM(
    "snap_to_end", "skip", name="monthdaypolicy", create_type=False
)
transaction_type = postgresql.ENUM(
    "income", "expense", name="transactiontype", create_type=False
)
cost_type = postgresql.ENUM("fixed", "variable", name="costtype", create_type=False)
mood_type = postgresql.ENUM("poor", "ok", "great", name="moodscore", create_type=False)
diet_type = postgresql.ENUM(
    "off", "over_half", "full", name="dietadherence", create_type=False
)
workout_type = postgresql.ENUM(
    "rest", "alternative", "gym", name="workouttype", create_type=False
)

ENUM_TYPES = (
    category_type,
    month_day_policy_type,
    transaction_type,
    cost_type,
    mood_type,
    diet_type,
    workout_type,
)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "recurring_expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("category", category_type, nullable=False),
        sa.Column("day_of_month", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_generated", sa.Date()),
        sa.Column(
            "month_day_policy",
            month_day_policy_type,
            nullable=False,
            server_default="snap_to_end",
        ),
        *_timestamps(),
        sa.CheckConstraint("amount_cents > 0", name="ck_recurring_amount_positive"),
        sa.CheckConstraint(
            "day_of_month BETWEEN 1 AND 31", name="ck_recurring_day_of_month"
        ),
    )
    op.create_index(
        "ix_recurring_user_active", "recurring_expenses", ["user_id", "active"]
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("category", category_type, nullable=False),
        sa.Column("cost_type", cost_type),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("installments_current", sa.Integer()),
        sa.Column("installments_total", sa.Integer()),
        sa.Column(
            "origin_obligation_id",
            sa.Integer(),
            sa.ForeignKey("recurring_expenses.id"),
        ),
        sa.Column("origin_period", sa.String(length=7)),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id",
            "origin_obligation_id",
            "origin_period",
            name="uq_txn_origin_period",
        ),
        sa.CheckConstraint("amount_cents > 0", name="ck_transactions_amount_positive"),
    )
    op.create_index("ix_transactions_user_date", "transactions", ["user_id", "date"])
    op.create_index(
        "ix_transactions_user_type_date", "transactions", ["user_id", "type", "date"]
    )

    op.create_table(
        "habits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "habit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "habit_id", sa.Integer(), sa.ForeignKey("habits.id"), nullable=False
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.UniqueConstraint("habit_id", "date", name="uq_habit_log_day"),
    )

    op.create_table(
        "daily_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("weight_kg", sa.Float()),
        sa.Column("sleep", mood_type),
        sa.Column("libido", mood_type),
        sa.Column("diet", diet_type),
        sa.Column("workout_type", workout_type),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_log_day"),
    )


def downgrade():
    op.drop_table("daily_logs")
    op.drop_table("habit_logs")
    op.drop_table("habits")
    op.drop_index("ix_transactions_user_type_date", table_name="transactions")
    op.drop_index("ix_transactions_user_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_recurring_user_active", table_name="recurring_expenses")
    op.drop_table("recurring_expenses")

    bind = op.get_bind()
    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(bind, checkfirst=True)
