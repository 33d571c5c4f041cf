from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from database import Base
from errors import NotFoundError, StoreError
from schemas import HabitIn
from services import HabitService
from store import LedgerStore

USER = "user-1"
DAY = date(2024, 3, 5)


def _session() -> Session:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    return Session(engine)


def _refuse_commit(session: Session, monkeypatch) -> None:
    def broken():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "commit", broken)


def test_toggle_marks_and_unmarks_a_habit():
    with _session() as session:
        service = HabitService(session, USER)
        read = service.create(HabitIn(title="Read 20 pages"))
        walk = service.create(HabitIn(title="Walk"))

        checklist = service.checklist(DAY)
        assert checklist.toggle(read.id) is True
        assert service.completed_on(DAY) == {read.id}

        assert checklist.toggle(walk.id) is True
        assert checklist.toggle(read.id) is False
        assert service.completed_on(DAY) == {walk.id}
        assert service.completed_on(date(2024, 3, 6)) == set()


def test_failed_write_reloads_state_from_store(monkeypatch):
    with _session() as session:
        service = HabitService(session, USER)
        read = service.create(HabitIn(title="Read"))
        walk = service.create(HabitIn(title="Walk"))
        checklist = service.checklist(DAY)
        checklist.toggle(walk.id)

        def broken(self, habit_id, day, done):
            raise StoreError("write refused")

        monkeypatch.setattr(LedgerStore, "set_habit_done", broken)

        with pytest.raises(StoreError):
            checklist.toggle(read.id)
        assert checklist.completed == {walk.id}


def test_deactivated_habits_drop_out_and_foreign_habits_are_hidden():
    with _session() as session:
        service = HabitService(session, USER)
        read = service.create(HabitIn(title="Read"))
        service.create(HabitIn(title="Stretch"))
        service.deactivate(read.id)

        assert [h.title for h in service.list_active()] == ["Stretch"]
        with pytest.raises(NotFoundError):
            HabitService(session, "someone-else").checklist(DAY).toggle(read.id)


def test_deactivated_habit_cannot_be_toggled_or_reported():
    with _session() as session:
        service = HabitService(session, USER)
        read = service.create(HabitIn(title="Read"))
        service.checklist(DAY).toggle(read.id)
        service.deactivate(read.id)

        assert service.completed_on(DAY) == set()
        with pytest.raises(NotFoundError):
            service.checklist(DAY).toggle(read.id)


def test_habit_writes_surface_store_errors(monkeypatch):
    with _session() as session:
        service = HabitService(session, USER)
        read = service.create(HabitIn(title="Read"))
        _refuse_commit(session, monkeypatch)

        with pytest.raises(StoreError):
            service.create(HabitIn(title="Walk"))
        with pytest.raises(StoreError):
            service.deactivate(read.id)

        monkeypatch.undo()
        assert [h.title for h in service.list_active()] == ["Read"]
