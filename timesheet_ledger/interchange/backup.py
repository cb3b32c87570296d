import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, ValidationError

from timesheet_ledger.entries.models import DEFAULT_HOURLY_RATE, Settings, TimeEntry, iso_timestamp
from timesheet_ledger.errors import ImportParseError

if TYPE_CHECKING:
    from timesheet_ledger.entries.store import EntryStore, MutationResult


logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"


class BackupSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    defaultHourlyRate: StrictInt | StrictFloat | None = None


class BackupArtifact(BaseModel):
    """Shallow schema of a backup file; entry records are kept as given"""

    model_config = ConfigDict(extra="ignore")

    entries: list[dict[str, Any]]
    settings: BackupSettings | None = None
    exportDate: Any = None
    version: Any = None


@dataclass
class BackupValidation:
    ok: bool
    problems: list[str] = field(default_factory=list)
    entries: list[TimeEntry] = field(default_factory=list)
    settings: Settings | None = None
    version: str | None = None


def export_backup(
    entries: Sequence[Mapping], settings: Mapping, exported_at: datetime | None = None
) -> dict[str, Any]:
    """Full-fidelity copy of the collection and settings"""
    exported_at = exported_at or datetime.now(timezone.utc)
    return {
        "entries": [dict(entry) for entry in entries],
        "settings": dict(settings),
        "exportDate": iso_timestamp(exported_at),
        "version": BACKUP_VERSION,
    }


def dump_backup(artifact: Mapping[str, Any]) -> str:
    return json.dumps(artifact, indent=2, ensure_ascii=False)


def backup_filename(day: date | None = None) -> str:
    day = day or datetime.now(timezone.utc).date()
    return f"backup-controle-horas-{day.isoformat()}.json"


def validate_backup(data: str | bytes | Mapping[str, Any]) -> BackupValidation:
    """Check the shape of a backup without touching any state.

    Unknown fields are ignored and a missing version is accepted.
    """
    if isinstance(data, str | bytes):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return BackupValidation(ok=False, problems=[f"not valid JSON: {e}"])

    if not isinstance(data, Mapping):
        return BackupValidation(ok=False, problems=["backup must be a JSON object"])

    try:
        artifact = BackupArtifact.model_validate(dict(data))
    except ValidationError as e:
        problems = [f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()]
        return BackupValidation(ok=False, problems=problems)

    settings = None
    if artifact.settings is not None:
        settings = artifact.settings.model_dump()
        if settings["defaultHourlyRate"] is None:
            settings["defaultHourlyRate"] = DEFAULT_HOURLY_RATE

    version = artifact.version
    if version is not None and version != BACKUP_VERSION:
        logger.warning(f"Importing backup with unknown {version=}")

    return BackupValidation(ok=True, entries=artifact.entries, settings=settings, version=version)


def import_backup(data: str | bytes | Mapping[str, Any]) -> tuple[list[TimeEntry], Settings | None]:
    """Parse a backup into (entries, settings); settings is None when the backup has none"""
    validation = validate_backup(data)
    if not validation.ok:
        logger.error(f"Rejected backup: {validation.problems}")
        raise ImportParseError("Backup could not be imported", validation.problems)
    return validation.entries, validation.settings


def restore_backup(store: "EntryStore", data: str | bytes | Mapping[str, Any]) -> "MutationResult":
    """Import a backup and hand it to the store; nothing changes if parsing fails"""
    entries, settings = import_backup(data)
    return store.adopt_snapshot(entries, settings)
