from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from timesheet_ledger.api.dependencies import get_store, raise_for_problems, raise_for_result
from timesheet_ledger.entries.models import PaymentStatus
from timesheet_ledger.entries.store import EntryStore
from timesheet_ledger.entries.validation import validate_changes, validate_draft
from timesheet_ledger.reports.queries import filter_entries, get_totals, sort_entries


router = APIRouter(prefix="/entries", tags=["entries"])


class EntryCreate(BaseModel):
    date: str
    startTime: str
    endTime: str
    description: str
    isPaid: bool = False
    hourlyRate: float | None = None


class EntryUpdate(BaseModel):
    date: str | None = None
    startTime: str | None = None
    endTime: str | None = None
    description: str | None = None
    isPaid: bool | None = None
    hourlyRate: float | None = None


class EntryList(BaseModel):
    entries: list[dict[str, Any]]
    totals: dict[str, float]


@router.get("")
async def list_entries(
    search: str = "",
    status: PaymentStatus = PaymentStatus.ALL,
    sort: Literal["date", "hours", "earnings"] = "date",
    store: EntryStore = Depends(get_store),
) -> EntryList:
    """Return entries matching the filters, with totals for the filtered view."""
    entries = sort_entries(filter_entries(store.entries, search=search, status=status), by=sort)
    return {"entries": entries, "totals": get_totals(entries).to_dict()}


@router.post("", status_code=201)
async def create_entry(payload: EntryCreate, store: EntryStore = Depends(get_store)) -> dict[str, Any]:
    """Record a new work session."""
    draft = payload.model_dump(exclude_none=True)
    raise_for_problems(validate_draft(draft))
    return raise_for_result(store.add(draft)).entry


@router.get("/{entry_id}")
async def get_entry(entry_id: str, store: EntryStore = Depends(get_store)) -> dict[str, Any]:
    entry = store.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


@router.patch("/{entry_id}")
async def update_entry(
    entry_id: str, payload: EntryUpdate, store: EntryStore = Depends(get_store)
) -> dict[str, Any]:
    """Change some fields of an entry."""
    current = store.get(entry_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Entry not found")

    changes = payload.model_dump(exclude_unset=True)
    raise_for_problems(validate_changes(changes) or validate_draft({**current, **changes}))
    return raise_for_result(store.update(entry_id, changes)).entry


@router.delete("/{entry_id}", status_code=204)
async def delete_entry(entry_id: str, store: EntryStore = Depends(get_store)) -> None:
    raise_for_result(store.delete(entry_id))


@router.post("/{entry_id}/toggle-paid")
async def toggle_paid(entry_id: str, store: EntryStore = Depends(get_store)) -> dict[str, Any]:
    """Flip the payment status of one entry."""
    return raise_for_result(store.toggle_paid(entry_id)).entry
