import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict

from timesheet_ledger.api.dependencies import get_store, raise_for_problems, raise_for_result
from timesheet_ledger.entries.store import EntryStore
from timesheet_ledger.entries.validation import validate_settings
from timesheet_ledger.errors import ImportParseError
from timesheet_ledger.interchange.backup import backup_filename, export_backup, restore_backup
from timesheet_ledger.interchange.table import export_table, table_filename


logger = logging.getLogger(__name__)

router = APIRouter(tags=["data"])


class SettingsIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    defaultHourlyRate: float


class ImportSummary(BaseModel):
    entries: int
    settings: dict[str, Any]


@router.get("/settings")
async def get_settings(store: EntryStore = Depends(get_store)) -> dict[str, Any]:
    return store.settings


@router.put("/settings")
async def save_settings(payload: SettingsIn, store: EntryStore = Depends(get_store)) -> dict[str, Any]:
    """Replace the settings record."""
    settings = payload.model_dump()
    raise_for_problems(validate_settings(settings))
    return raise_for_result(store.save_settings(settings)).settings


@router.get("/export/backup")
async def download_backup(store: EntryStore = Depends(get_store)) -> JSONResponse:
    """Return a full backup of entries and settings as a JSON attachment."""
    return JSONResponse(
        content=export_backup(store.entries, store.settings),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.post("/import/backup")
async def upload_backup(request: Request, store: EntryStore = Depends(get_store)) -> ImportSummary:
    """Replace all data with the contents of a backup file."""
    try:
        result = restore_backup(store, await request.body())
    except ImportParseError as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "problems": e.problems}) from e

    raise_for_result(result)
    logger.info(f"Imported backup with {len(result.entries)} entries")
    return {"entries": len(result.entries), "settings": result.settings}


@router.get("/export/table")
async def download_table(store: EntryStore = Depends(get_store)) -> Response:
    """Return entries as a semicolon separated sheet."""
    return Response(
        content=export_table(store.entries).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{table_filename()}"'},
    )


@router.delete("/data", status_code=204)
async def clear_data(store: EntryStore = Depends(get_store)) -> None:
    """Remove every entry and reset settings."""
    raise_for_result(store.clear())
