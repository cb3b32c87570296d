"""
Test HTTP API Module

This module tests the FastAPI surface including:
- Entry CRUD and payment toggling
- Summaries and statistics
- Settings validation
- Backup import/export and sheet export
- Error translation for missing entries and failed writes
"""

from timesheet_ledger.entries.models import ENTRIES_KEY

from .conftest import make_entry


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": "0.1.0"}


def test_create_and_get_entry(client, draft):
    response = client.post("/api/v1/entries", json=draft)
    assert response.status_code == 201
    entry = response.json()
    assert entry["id"] == "entry-1"
    assert entry["hourlyRate"] == 50

    assert client.get(f"/api/v1/entries/{entry['id']}").json() == entry


def test_create_without_rate_uses_default(client, draft):
    client.put("/api/v1/settings", json={"defaultHourlyRate": 70})
    draft.pop("hourlyRate")
    assert client.post("/api/v1/entries", json=draft).json()["hourlyRate"] == 70


def test_create_rejects_invalid_entry(client, draft, store):
    draft["description"] = ""
    response = client.post("/api/v1/entries", json=draft)
    assert response.status_code == 422
    assert response.json()["detail"] == ["description is required"]
    assert store.entries == []


def test_list_filters_sorts_and_totals(client, store):
    store.adopt_snapshot(
        [
            make_entry("a", "2024-01-01", "09:00", "10:00", rate=10, description="Design"),
            make_entry("b", "2024-01-02", "09:00", "12:00", rate=10, is_paid=True, description="Build"),
        ]
    )

    body = client.get("/api/v1/entries", params={"sort": "hours"}).json()
    assert [entry["id"] for entry in body["entries"]] == ["b", "a"]
    assert body["totals"]["total_earnings"] == 40.0

    body = client.get("/api/v1/entries", params={"status": "unpaid", "search": "des"}).json()
    assert [entry["id"] for entry in body["entries"]] == ["a"]


def test_update_entry(client, draft):
    entry = client.post("/api/v1/entries", json=draft).json()
    response = client.patch(f"/api/v1/entries/{entry['id']}", json={"endTime": "18:00"})
    assert response.status_code == 200
    assert response.json()["endTime"] == "18:00"
    assert response.json()["description"] == "Client work"


def test_update_validates_merged_entry(client, draft):
    entry = client.post("/api/v1/entries", json=draft).json()
    response = client.patch(f"/api/v1/entries/{entry['id']}", json={"endTime": "09:00"})
    assert response.status_code == 422


def test_toggle_paid_and_delete(client, draft):
    entry = client.post("/api/v1/entries", json=draft).json()

    assert client.post(f"/api/v1/entries/{entry['id']}/toggle-paid").json()["isPaid"] is True
    assert client.delete(f"/api/v1/entries/{entry['id']}").status_code == 204
    assert client.get("/api/v1/entries").json()["entries"] == []


def test_unknown_entry_returns_404(client):
    assert client.get("/api/v1/entries/missing").status_code == 404
    assert client.patch("/api/v1/entries/missing", json={}).status_code == 404
    assert client.delete("/api/v1/entries/missing").status_code == 404
    assert client.post("/api/v1/entries/missing/toggle-paid").status_code == 404


def test_summaries_and_stats(client, store):
    store.adopt_snapshot(
        [
            make_entry("a", "2024-01-01", "09:00", "17:00", is_paid=True),
            make_entry("b", "2024-01-01", "17:00", "19:00"),
            make_entry("c", "2024-01-02", "23:00", "01:00", is_paid=True),
        ]
    )

    summaries = client.get("/api/v1/summaries").json()
    assert summaries[0]["date"] == "2024-01-02"
    assert summaries[1] == {
        "date": "2024-01-01",
        "total_hours": 10.0,
        "total_earnings": 500.0,
        "entries_count": 2,
        "is_paid": False,
    }
    assert len(client.get("/api/v1/summaries", params={"limit": 1}).json()) == 1

    stats = client.get("/api/v1/stats").json()
    assert stats["total_hours"] == 12.0
    assert stats["days_worked"] == 2
    assert stats["average_hours_per_day"] == 6.0


def test_settings_round_trip_and_validation(client):
    assert client.get("/api/v1/settings").json() == {"defaultHourlyRate": 50}
    assert client.put("/api/v1/settings", json={"defaultHourlyRate": 0}).status_code == 422
    assert client.put("/api/v1/settings", json={"defaultHourlyRate": 80}).json() == {"defaultHourlyRate": 80}


def test_backup_export_and_import(client, draft, store):
    client.post("/api/v1/entries", json=draft)
    response = client.get("/api/v1/export/backup")
    assert response.status_code == 200
    assert "backup-controle-horas-" in response.headers["content-disposition"]
    backup = response.json()

    client.delete("/api/v1/data")
    assert store.entries == []

    response = client.post("/api/v1/import/backup", content=response.content)
    assert response.status_code == 200
    assert response.json()["entries"] == 1
    assert store.entries == backup["entries"]


def test_import_rejects_malformed_backup(client, draft, store):
    client.post("/api/v1/entries", json=draft)
    before = store.entries

    response = client.post("/api/v1/import/backup", json={"entries": 7})

    assert response.status_code == 400
    assert response.json()["detail"]["problems"]
    assert store.entries == before


def test_table_export(client, draft):
    client.post("/api/v1/entries", json=draft)
    response = client.get("/api/v1/export/table")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "controle-horas-" in response.headers["content-disposition"]
    assert response.content.startswith(b"\xef\xbb\xbf")
    assert response.text.lstrip("\ufeff").split("\n")[1].startswith("01/01/2024;09:00;17:00;8;")


def test_write_failure_returns_503_and_keeps_state(client, draft, storage, store):
    storage.fail_keys.add(ENTRIES_KEY)
    response = client.post("/api/v1/entries", json=draft)
    assert response.status_code == 503
    assert store.entries == []


def test_update_rejects_null_rate(client, draft, store):
    entry = client.post("/api/v1/entries", json=draft).json()
    response = client.patch(f"/api/v1/entries/{entry['id']}", json={"hourlyRate": None})

    assert response.status_code == 422
    assert response.json()["detail"] == ["hourlyRate cannot be null"]
    assert store.get(entry["id"])["hourlyRate"] == 50


def test_numeric_ids_from_a_backup_are_reachable(client, store):
    entry = make_entry("a", "2024-01-01", "09:00", "10:00")
    entry["id"] = 7
    store.adopt_snapshot([entry])

    assert client.get("/api/v1/entries/7").json()["id"] == 7
    assert client.post("/api/v1/entries/7/toggle-paid").json()["isPaid"] is True
    assert client.delete("/api/v1/entries/7").status_code == 204
    assert store.entries == []
