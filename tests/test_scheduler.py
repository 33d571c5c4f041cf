from contextlib import contextmanager
from datetime import date

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from database import Base
from models import Transaction
from scheduler import reconcile_all_users
from schemas import ObligationIn
from services import RecurringObligationService


def test_reconcile_all_users_covers_every_owner_once_per_month():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    @contextmanager
    def scope():
        with Session(engine) as session:
            yield session
            session.commit()

    with Session(engine) as session:
        for user_id, description in (("alice", "Rent"), ("bob", "Gym"), ("bob", "Phone")):
            RecurringObligationService(session, user_id).create(
                ObligationIn(
                    description=description,
                    amount_cents=10_000,
                    category="Services",
                    day_of_month=1,
                )
            )
        carol = RecurringObligationService(session, "carol")
        old_plan = carol.create(
            ObligationIn(
                description="Old plan",
                amount_cents=5_000,
                category="Services",
                day_of_month=1,
            )
        )
        carol.deactivate(old_plan.id)

    assert reconcile_all_users(scope, today=date(2024, 6, 3)) == 3
    assert reconcile_all_users(scope, today=date(2024, 6, 20)) == 0

    with Session(engine) as session:
        count = session.scalar(select(func.count()).select_from(Transaction))
        assert count == 3
