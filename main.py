import logging
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from auth import InvalidToken, verify_token
from database import SessionLocal, init_db
from errors import LedgerValidationError, NotFoundError, StoreError
from models import DailyLog
from periods import PeriodKey, local_today, resolve_period
from scheduler import SchedulerManager
from schemas import (
    DailyLogIn,
    HabitIn,
    ObligationIn,
    ObligationOut,
    TransactionIn,
    TransactionOut,
)
from scores import display_table, style_for
from services import (
    DailyLogService,
    HabitService,
    LedgerSummaryService,
    RecurringObligationService,
    TransactionService,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Lifeboard")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def current_user_id(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        return verify_token(authorization.split(" ", 1)[1].strip())
    except InvalidToken as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc


def period_param(month: Optional[str] = Query(default=None)) -> PeriodKey:
    try:
        return resolve_period(month)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


scheduler_manager = SchedulerManager()


@app.on_event("startup")
def startup_event():
    init_db()
    scheduler_manager.start()


@app.on_event("shutdown")
def shutdown_event():
    scheduler_manager.stop()


@app.exception_handler(StoreError)
def store_error_handler(_request, exc: StoreError):
    logger.warning(
        f"store_error: obligation={exc.obligation_id} "
        f"transaction={exc.transaction_id} error={exc}"
    )
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
def not_found_handler(_request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(LedgerValidationError)
def validation_error_handler(_request, exc: LedgerValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def _daily_log_payload(log: DailyLog) -> dict[str, object]:
    dimensions = ("sleep", "libido", "diet", "workout_type")
    payload: dict[str, object] = {
        "date": log.date.isoformat(),
        "weight_kg": log.weight_kg,
        "notes": log.notes,
    }
    for dimension in dimensions:
        value = getattr(log, dimension)
        style = style_for(dimension, value)
        payload[dimension] = {
            "value": value.value if value is not None else None,
            "label": style.label if style else None,
            "background": style.background if style else None,
            "color": style.color if style else None,
        }
    return payload


# --- ledger ---


@app.get("/api/transactions")
def list_transactions(
    period: PeriodKey = Depends(period_param),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    txns = TransactionService(db, user_id).list_for_period(period)
    return {
        "period": str(period),
        "transactions": [
            TransactionOut.model_validate(t).model_dump(mode="json") for t in txns
        ],
    }


@app.post("/api/transactions", status_code=201)
def create_transaction(
    data: TransactionIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    txns = TransactionService(db, user_id).create(data)
    return {
        "created": len(txns),
        "transactions": [
            TransactionOut.model_validate(t).model_dump(mode="json") for t in txns
        ],
    }


@app.delete("/api/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    TransactionService(db, user_id).delete(transaction_id)
    return Response(status_code=204)


@app.get("/api/summary")
def period_summary(
    period: PeriodKey = Depends(period_param),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return LedgerSummaryService(db, user_id).summary(period).as_dict()


@app.get("/api/fixed-expenses")
def fixed_expenses(
    period: PeriodKey = Depends(period_param),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    items = LedgerSummaryService(db, user_id).fixed_expense_checklist(period)
    return {
        "period": str(period),
        "expected": [{"description": i.description, "paid": i.paid} for i in items],
    }


# --- recurring expenses ---


@app.get("/api/recurring")
def list_recurring(
    period: PeriodKey = Depends(period_param),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    rows = RecurringObligationService(db, user_id).status_for(period)
    return {
        "period": str(period),
        "recurring": [
            {
                **ObligationOut.model_validate(row["obligation"]).model_dump(
                    mode="json"
                ),
                "generated": row["generated"],
                "not_applicable": row["not_applicable"],
            }
            for row in rows
        ],
    }


@app.post("/api/recurring", status_code=201)
def create_recurring(
    data: ObligationIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    obligation = RecurringObligationService(db, user_id).create(data)
    return ObligationOut.model_validate(obligation).model_dump(mode="json")


@app.delete("/api/recurring/{obligation_id}", status_code=204)
def delete_recurring(
    obligation_id: int,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    RecurringObligationService(db, user_id).deactivate(obligation_id)
    return Response(status_code=204)


@app.post("/api/recurring/reconcile")
def reconcile_recurring(
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    result = RecurringObligationService(db, user_id).reconcile()
    status_code = {"ok": 200, "partial": 207, "failed": 502}[result.status]
    return JSONResponse(status_code=status_code, content=result.as_dict())


# --- habits ---


@app.get("/api/habits")
def list_habits(
    day: Optional[date] = Query(default=None),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    day = day or local_today()
    service = HabitService(db, user_id)
    done = service.completed_on(day)
    return {
        "date": day.isoformat(),
        "habits": [
            {"id": h.id, "title": h.title, "done": h.id in done}
            for h in service.list_active()
        ],
    }


@app.post("/api/habits", status_code=201)
def create_habit(
    data: HabitIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    habit = HabitService(db, user_id).create(data)
    return {"id": habit.id, "title": habit.title}


@app.delete("/api/habits/{habit_id}", status_code=204)
def delete_habit(
    habit_id: int,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    HabitService(db, user_id).deactivate(habit_id)
    return Response(status_code=204)


@app.post("/api/habits/{habit_id}/toggle")
def toggle_habit(
    habit_id: int,
    day: Optional[date] = Query(default=None),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    checklist = HabitService(db, user_id).checklist(day or local_today())
    done = checklist.toggle(habit_id)
    return {"habit_id": habit_id, "date": checklist.day.isoformat(), "done": done}


# --- daily log ---


@app.get("/api/daily-logs")
def daily_log_history(
    limit: int = Query(default=60, ge=1, le=366),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    logs = DailyLogService(db, user_id).history(limit)
    return {"logs": [_daily_log_payload(log) for log in logs]}


@app.get("/api/daily-logs/{day}")
def get_daily_log(
    day: date,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    log = DailyLogService(db, user_id).get(day)
    if log is None:
        raise HTTPException(status_code=404, detail="No log for this day")
    return _daily_log_payload(log)


@app.put("/api/daily-logs/{day}")
def put_daily_log(
    day: date,
    data: DailyLogIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    log = DailyLogService(db, user_id).upsert(day, data)
    return _daily_log_payload(log)


@app.get("/api/scores")
def score_styles():
    return display_table()


def main():
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
