"""
Transactions view API endpoints
"""
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from walletwise.application.transactions import GroupTransactionsUseCase
from walletwise.domain.buckets import TIME_RANGE_WEEKLY
from walletwise.domain.payload import PayloadError


router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


# === Request models ===

class GroupTransactionsRequest(BaseModel):
    transactions: list[dict[str, Any]] = []
    time_range: str = Field(TIME_RANGE_WEEKLY, alias="range")  # daily | weekly | monthly
    firstDayOfWeek: int = Field(1, ge=0, le=6)  # 0 = воскресенье
    now: datetime | None = None  # None = время запроса


# === Endpoints ===

@router.get("/buckets")
def list_buckets(
    time_range: str = Query(TIME_RANGE_WEEKLY, alias="range"),
    first_day_of_week: int = Query(1, alias="firstDayOfWeek", ge=0, le=6),
    now: datetime | None = None,
):
    """Бакеты периода и диапазон дат для запроса транзакций"""
    view = GroupTransactionsUseCase().execute(
        transaction_payloads=[],
        time_range=time_range,
        now=now or datetime.now(timezone.utc),
        first_day_of_week=first_day_of_week,
    )
    return view.to_payload()


@router.post("/grouped")
def grouped_transactions(req: GroupTransactionsRequest):
    """Разложить переданные транзакции по бакетам периода"""
    try:
        view = GroupTransactionsUseCase().execute(
            transaction_payloads=req.transactions,
            time_range=req.time_range,
            now=req.now or datetime.now(timezone.utc),
            first_day_of_week=req.firstDayOfWeek,
        )
    except PayloadError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return view.to_payload()
