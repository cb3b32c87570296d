import json
import logging
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from timesheet_ledger.db.base import KeyValueStorage
from timesheet_ledger.errors import LedgerError, StorageReadError, StorageWriteError

from .models import (
    DEFAULT_HOURLY_RATE,
    ENTRIES_KEY,
    SETTINGS_KEY,
    EntryDraft,
    Settings,
    TimeEntry,
    default_settings,
    iso_timestamp,
)


logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id", "createdAt")
RECOVERY_SUFFIX = "_recovery"


class MutationStatus(Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    WRITE_FAILED = "write_failed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a store mutation.

    ``entries`` and ``settings`` are always the committed snapshot. When the
    write failed, ``attempted_entries``/``attempted_settings`` hold the state
    that was not committed, and ``entry``/``changes`` the change itself, so
    the caller can ``retry`` it or drop it.
    """

    action: str
    status: MutationStatus
    entries: list[TimeEntry]
    settings: Settings
    entry: TimeEntry | None = None
    changes: dict[str, Any] | None = None
    attempted_entries: list[TimeEntry] | None = None
    attempted_settings: Settings | None = None
    error: LedgerError | None = None

    @property
    def ok(self) -> bool:
        return self.status is MutationStatus.APPLIED


@dataclass(frozen=True)
class LoadResult:
    entries: list[TimeEntry]
    settings: Settings
    errors: list[StorageReadError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def warnings(self) -> list[str]:
        return [str(error) for error in self.errors]


Listener = Callable[[MutationResult], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EntryStore:
    """Owns the entry collection and settings, persisting after every write"""

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.storage = storage
        self.clock = clock or _utc_now
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._entries: list[TimeEntry] = []
        self._settings: Settings = default_settings()
        self._listeners: list[Listener] = []

    @property
    def entries(self) -> list[TimeEntry]:
        return [dict(entry) for entry in self._entries]

    @property
    def settings(self) -> Settings:
        return dict(self._settings)

    def get(self, entry_id: str) -> TimeEntry | None:
        entry = self._find(entry_id)
        return dict(entry) if entry is not None else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for every mutation result; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def load(self) -> LoadResult:
        """Read the persisted collection and settings, falling back to empty/default"""
        errors = []

        try:
            self._entries = self._read_entries()
        except StorageReadError as e:
            logger.error(f"Falling back to an empty collection: {e}")
            errors.append(e)
            self._entries = []
            self._keep_unreadable(ENTRIES_KEY)

        try:
            self._settings = self._read_settings()
        except StorageReadError as e:
            logger.error(f"Falling back to default settings: {e}")
            errors.append(e)
            self._settings = default_settings()
            self._keep_unreadable(SETTINGS_KEY)

        logger.info(f"Loaded {len(self._entries)} entries")
        return LoadResult(entries=self.entries, settings=self.settings, errors=errors)

    def add(self, draft: EntryDraft) -> MutationResult:
        """Create an entry with a fresh id, resolved rate and timestamps"""
        now = iso_timestamp(self.clock())
        rate = draft.get("hourlyRate")
        entry: TimeEntry = {
            **draft,
            "id": self._new_id(),
            "isPaid": bool(draft.get("isPaid", False)),
            "hourlyRate": rate if rate is not None else self._settings["defaultHourlyRate"],
            "createdAt": now,
            "updatedAt": now,
        }
        logger.info(f"Adding entry {entry['id']} for {entry.get('date')}")
        return self._commit("add", entries=[*self._entries, entry], entry=entry)

    def update(self, entry_id: str, fields: Mapping[str, Any]) -> MutationResult:
        """Merge fields into an entry; id and createdAt cannot be changed"""
        current = self._find(entry_id)
        if current is None:
            return self._not_found("update", entry_id)

        changes = {key: value for key, value in fields.items() if key not in IMMUTABLE_FIELDS}
        updated: TimeEntry = {**current, **changes, "updatedAt": iso_timestamp(self.clock())}
        entries = [updated if entry is current else entry for entry in self._entries]
        logger.info(f"Updating entry {entry_id}: {sorted(changes)}")
        return self._commit("update", entries=entries, entry=updated, changes=changes)

    def delete(self, entry_id: str) -> MutationResult:
        current = self._find(entry_id)
        if current is None:
            return self._not_found("delete", entry_id)

        entries = [entry for entry in self._entries if entry is not current]
        logger.info(f"Deleting entry {entry_id}")
        return self._commit("delete", entries=entries, entry=dict(current))

    def toggle_paid(self, entry_id: str) -> MutationResult:
        current = self._find(entry_id)
        if current is None:
            return self._not_found("toggle_paid", entry_id)
        return self.update(entry_id, {"isPaid": not current.get("isPaid", False)})

    def save_settings(self, settings: Mapping[str, Any]) -> MutationResult:
        """Replace the settings record. Rate validation is left to callers."""
        new_settings: Settings = {**settings}
        new_settings.setdefault("defaultHourlyRate", DEFAULT_HOURLY_RATE)
        logger.info(f"Saving settings: {new_settings}")
        return self._commit("save_settings", settings=new_settings)

    def adopt_snapshot(
        self, entries: Sequence[Mapping[str, Any]], settings: Mapping[str, Any] | None = None
    ) -> MutationResult:
        """Replace the whole state with an external collection, e.g. a restored backup"""
        problems = check_snapshot(entries)
        if problems:
            return self._reject("adopt_snapshot", "; ".join(problems))

        new_settings = None
        if settings is not None:
            new_settings = {**settings}
            new_settings.setdefault("defaultHourlyRate", DEFAULT_HOURLY_RATE)

        logger.info(f"Adopting snapshot with {len(entries)} entries")
        return self._commit(
            "adopt_snapshot", entries=[dict(entry) for entry in entries], settings=new_settings
        )

    def clear(self) -> MutationResult:
        """Remove all persisted data and reset to an empty collection and default settings"""
        try:
            self.storage.remove(ENTRIES_KEY)
            self.storage.remove(SETTINGS_KEY)
        except StorageWriteError as e:
            logger.error(f"Failed to clear stored data: {e}")
            return self._finish(
                MutationResult(
                    action="clear",
                    status=MutationStatus.WRITE_FAILED,
                    entries=self.entries,
                    settings=self.settings,
                    attempted_entries=[],
                    attempted_settings=default_settings(),
                    error=e,
                )
            )

        self._entries = []
        self._settings = default_settings()
        logger.info("Cleared all entries and settings")
        return self._finish(
            MutationResult(
                action="clear", status=MutationStatus.APPLIED, entries=[], settings=self.settings
            )
        )

    def retry(self, result: MutationResult) -> MutationResult:
        """Re-apply a failed mutation to the current state, committing it on success.

        Entry-level changes are replayed, so mutations committed since the
        failure are kept. Whole-state replacements (settings, snapshots,
        clear) are written again as attempted.
        """
        if result.status is not MutationStatus.WRITE_FAILED:
            return result

        logger.info(f"Retrying failed {result.action}")
        if result.action == "clear":
            return self.clear()
        if result.action == "update":
            return self.update(result.entry["id"], result.changes or {})
        if result.action == "delete":
            return self.delete(result.entry["id"])
        if result.action == "add":
            if self._find(result.entry["id"]) is not None:
                return self._reject("add", f"id {result.entry['id']} is already in use")
            return self._commit("add", entries=[*self._entries, result.entry], entry=result.entry)
        return self._commit(
            result.action,
            entries=result.attempted_entries,
            settings=result.attempted_settings,
            entry=result.entry,
        )

    def _commit(
        self,
        action: str,
        entries: list[TimeEntry] | None = None,
        settings: Settings | None = None,
        entry: TimeEntry | None = None,
        changes: dict[str, Any] | None = None,
    ) -> MutationResult:
        try:
            self._persist(entries, settings)
        except StorageWriteError as e:
            logger.error(f"Failed to persist {action}: {e}")
            return self._finish(
                MutationResult(
                    action=action,
                    status=MutationStatus.WRITE_FAILED,
                    entries=self.entries,
                    settings=self.settings,
                    entry=entry,
                    changes=changes,
                    attempted_entries=entries,
                    attempted_settings=settings,
                    error=e,
                )
            )

        if entries is not None:
            self._entries = entries
        if settings is not None:
            self._settings = settings
        return self._finish(
            MutationResult(
                action=action,
                status=MutationStatus.APPLIED,
                entries=self.entries,
                settings=self.settings,
                entry=dict(entry) if entry is not None else None,
            )
        )

    def _persist(self, entries: list[TimeEntry] | None, settings: Settings | None) -> None:
        """Write the full collection and/or settings; both or neither end up stored"""
        try:
            entries_blob = json.dumps(entries) if entries is not None else None
            settings_blob = json.dumps(settings) if settings is not None else None
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Could not serialize data: {e}") from e

        if entries_blob is not None:
            previous = json.dumps(self._entries)
            self.storage.set(ENTRIES_KEY, entries_blob)
        if settings_blob is not None:
            try:
                self.storage.set(SETTINGS_KEY, settings_blob)
            except StorageWriteError:
                if entries_blob is not None:
                    self._restore_entries(previous)
                raise

    def _restore_entries(self, previous: str) -> None:
        try:
            self.storage.set(ENTRIES_KEY, previous)
        except StorageWriteError:
            logger.exception("Could not restore stored entries after a failed settings write")

    def _read_entries(self) -> list[TimeEntry]:
        raw = self.storage.get(ENTRIES_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Stored entries are not valid JSON: {e}") from e

        problems = check_snapshot(data)
        if problems:
            raise StorageReadError(f"Stored entries are malformed: {'; '.join(problems)}")
        return data

    def _read_settings(self) -> Settings:
        raw = self.storage.get(SETTINGS_KEY)
        if raw is None:
            return default_settings()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Stored settings are not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise StorageReadError("Stored settings are not an object")
        data.setdefault("defaultHourlyRate", DEFAULT_HOURLY_RATE)
        return data

    def _keep_unreadable(self, key: str) -> None:
        """Copy an unreadable blob aside so the next write cannot destroy it"""
        try:
            raw = self.storage.get(key)
            if raw is not None:
                self.storage.set(key + RECOVERY_SUFFIX, raw)
                logger.warning(f"Kept unreadable {key} under {key + RECOVERY_SUFFIX}")
        except (StorageReadError, StorageWriteError):
            logger.exception(f"Could not keep a copy of unreadable {key}")

    def _find(self, entry_id: str) -> TimeEntry | None:
        # restored backups may carry numeric ids
        return next(
            (entry for entry in self._entries if str(entry.get("id")) == str(entry_id)), None
        )

    def _new_id(self) -> str:
        existing = {str(entry.get("id")) for entry in self._entries}
        new_id = self.id_factory()
        while new_id in existing:
            new_id = self.id_factory()
        return new_id

    def _not_found(self, action: str, entry_id: str) -> MutationResult:
        logger.warning(f"No entry found for {action}: {entry_id=}")
        return self._finish(
            MutationResult(
                action=action,
                status=MutationStatus.NOT_FOUND,
                entries=self.entries,
                settings=self.settings,
            )
        )

    def _reject(self, action: str, reason: str) -> MutationResult:
        logger.warning(f"Rejected {action}: {reason}")
        return self._finish(
            MutationResult(
                action=action,
                status=MutationStatus.REJECTED,
                entries=self.entries,
                settings=self.settings,
                error=LedgerError(reason),
            )
        )

    def _finish(self, result: MutationResult) -> MutationResult:
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception:
                logger.exception(f"Listener failed for {result.action}")
        return result


def check_snapshot(entries: Any) -> list[str]:
    """Shallow shape check of an entry collection: a list of records with unique ids"""
    if not isinstance(entries, list | tuple):
        return [f"entries must be a list, got {type(entries).__name__}"]

    problems = []
    seen = set()
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            problems.append(f"entries[{index}] must be an object")
            continue
        entry_id = entry.get("id")
        if not isinstance(entry_id, str | int):
            continue
        if str(entry_id) in seen:
            problems.append(f"entries[{index}] duplicates id {entry_id}")
        seen.add(str(entry_id))
    return problems
