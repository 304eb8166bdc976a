"""Meal log and storage endpoints."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from snapplate.api.models import MealCreateRequest, PruneRequest
from snapplate.domain.meals import DailyLog, MealEntry

if TYPE_CHECKING:
    from snapplate.containers import AppContainer

router = APIRouter(prefix="/api", tags=["logs"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/logs")
async def list_log_dates(request: Request) -> dict[str, object]:
    """Return recorded dates, most recent first."""
    return {"dates": _container(request).log_store.list_dates()}


@router.get("/logs/{log_date}")
async def get_daily_log(log_date: date, request: Request) -> dict[str, object]:
    """Return a day's meals with totals."""
    daily = _container(request).log_store.get(log_date.isoformat())
    return _daily_payload(daily)


@router.post("/logs", status_code=status.HTTP_201_CREATED)
async def create_meal_entry(
    body: MealCreateRequest, request: Request
) -> dict[str, object]:
    """Save an analyzed meal to the log."""
    log_store = _container(request).log_store
    date_key = body.log_date.isoformat() if body.log_date else log_store.today()
    entry = MealEntry.create(
        body.foods, image_data_url=body.image_data_url, timestamp=body.timestamp
    )
    log_store.append(entry, date_key)
    return {"date": date_key, "entry": entry.model_dump(mode="json")}


@router.delete("/logs/{log_date}/{entry_id}")
async def delete_meal_entry(
    log_date: date, entry_id: str, request: Request
) -> dict[str, str]:
    """Delete a meal entry."""
    if not _container(request).log_store.remove(entry_id, log_date.isoformat()):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"status": "deleted"}


@router.post("/logs/prune")
async def prune_logs(body: PruneRequest, request: Request) -> dict[str, int]:
    """Keep only the most recent days."""
    kept = _container(request).log_store.prune(body.days_to_keep)
    return {"days_kept": kept}


@router.get("/storage")
async def storage_usage(request: Request) -> dict[str, object]:
    """Return advisory storage usage."""
    usage = _container(request).log_store.usage()
    return {
        "used_bytes": usage.used_bytes,
        "quota_bytes": usage.quota_bytes,
        "percentage": round(usage.percentage, 2),
    }


def _daily_payload(daily: DailyLog) -> dict[str, object]:
    return {
        "date": daily.date,
        "meals": [meal.model_dump(mode="json") for meal in daily.meals],
        "totals": daily.totals().model_dump(),
    }
