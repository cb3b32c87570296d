from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from timesheet_ledger.api.main import create_app
from timesheet_ledger.db.base import MemoryStorage
from timesheet_ledger.entries.store import EntryStore
from timesheet_ledger.errors import StorageWriteError


class FailingStorage(MemoryStorage):
    """Memory storage whose writes fail for selected keys"""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_keys = set()

    def set(self, key, value):
        if key in self.fail_keys:
            raise StorageWriteError(f"quota exceeded for {key}")
        super().set(key, value)

    def remove(self, key):
        if key in self.fail_keys:
            raise StorageWriteError(f"cannot remove {key}")
        super().remove(key)


@pytest.fixture
def storage():
    return FailingStorage()


@pytest.fixture
def clock():
    ticks = count()
    start = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    return lambda: start + timedelta(minutes=next(ticks))


@pytest.fixture
def store(storage, clock):
    ids = count(1)
    store = EntryStore(storage, clock=clock, id_factory=lambda: f"entry-{next(ids)}")
    store.load()
    return store


@pytest.fixture
def draft():
    return {
        "date": "2024-01-01",
        "startTime": "09:00",
        "endTime": "17:00",
        "description": "Client work",
        "isPaid": False,
        "hourlyRate": 50,
    }


@pytest.fixture
def client(store):
    return TestClient(create_app(store))


def make_entry(entry_id, date, start, end, rate=50, is_paid=False, description="Work"):
    return {
        "id": entry_id,
        "date": date,
        "startTime": start,
        "endTime": end,
        "description": description,
        "isPaid": is_paid,
        "hourlyRate": rate,
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-01T00:00:00.000Z",
    }
