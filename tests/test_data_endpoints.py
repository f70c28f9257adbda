from __future__ import annotations

import json
import time
from pathlib import Path

from persistence.disk_store import DiskScheduleStore
from persistence.schedule_state import DEFAULT_STAFF_LIST, ScheduleDocument


def test_cold_start_returns_default_document(client):
    r = client.get("/api/data")
    assert r.status_code == 200
    assert r.json() == {
        "meetings": [],
        "staffList": list(DEFAULT_STAFF_LIST),
        "masterPassword": "admin123",
    }
    assert r.headers["etag"].startswith('"')


def test_replace_then_get_returns_same_document(client):
    doc = {"meetings": [{"id": 1, "title": "sync"}], "staffList": ["Alice"], "masterPassword": "x"}

    r = client.post("/api/data", json=doc)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert isinstance(body["processingTime"], int)
    assert "no-store" in r.headers["cache-control"]
    assert r.headers["pragma"] == "no-cache"
    assert r.headers["expires"] == "0"

    r = client.get("/api/data")
    assert r.status_code == 200
    assert r.json() == doc


def test_meetings_not_an_array_is_rejected(client, data_file: Path):
    r = client.post("/api/data", json={"meetings": "not-an-array"})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert "meetings" in r.json()["message"]
    assert not data_file.exists()


def test_missing_meetings_is_rejected(client):
    r = client.post("/api/data", json={"staffList": ["Alice"]})
    assert r.status_code == 400
    assert "meetings" in r.json()["message"]


def test_empty_body_is_rejected(client):
    r = client.post("/api/data", content=b"", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_malformed_json_is_rejected(client):
    r = client.post("/api/data", content=b'{"meetings": [', headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Request data is not valid JSON."}


def test_oversized_body_gets_413(client):
    big = {"meetings": [{"notes": "x" * (5 * 1024 * 1024)}]}
    r = client.post("/api/data", json=big)
    assert r.status_code == 413
    assert r.json()["success"] is False


def test_transport_guard_uses_configured_limit(make_client):
    c = make_client(max_body_bytes=64)
    r = c.post("/api/data", json={"meetings": []})
    assert r.status_code == 200

    r = c.post("/api/data", json={"meetings": [{"n": "y" * 100}]})
    assert r.status_code == 413
    assert r.json()["success"] is False


def test_staff_list_inherited_from_stored_state(client, data_file: Path):
    r = client.post("/api/data", json={"meetings": [], "staffList": ["Alice", "Bob"], "masterPassword": "p"})
    assert r.status_code == 200

    r = client.post("/api/data", json={"meetings": [{"id": 7}], "masterPassword": "p"})
    assert r.status_code == 200

    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert stored["staffList"] == ["Alice", "Bob"]
    assert stored["meetings"] == [{"id": 7}]


def test_missing_password_gets_default(client):
    r = client.post("/api/data", json={"meetings": [], "staffList": ["A"]})
    assert r.status_code == 200
    assert client.get("/api/data").json()["masterPassword"] == "admin123"


def test_sequential_writes_last_one_wins(client):
    a = {"meetings": [{"id": "A"}], "staffList": ["Alice"], "masterPassword": "x"}
    b = {"meetings": [{"id": "B"}], "staffList": ["Bob"], "masterPassword": "y"}
    assert client.post("/api/data", json=a).status_code == 200
    assert client.post("/api/data", json=b).status_code == 200
    assert client.get("/api/data").json() == b


def test_stale_if_match_is_rejected(client):
    etag = client.get("/api/data").headers["etag"]

    first = {"meetings": [{"id": "A"}], "staffList": ["Alice"], "masterPassword": "x"}
    r = client.post("/api/data", json=first, headers={"If-Match": etag})
    assert r.status_code == 200
    new_etag = r.headers["etag"]
    assert new_etag != etag

    second = {"meetings": [{"id": "B"}], "staffList": ["Alice"], "masterPassword": "x"}
    r = client.post("/api/data", json=second, headers={"If-Match": etag})
    assert r.status_code == 412
    assert r.json()["success"] is False
    assert client.get("/api/data").json() == first

    r = client.post("/api/data", json=second, headers={"If-Match": new_etag})
    assert r.status_code == 200
    assert client.get("/api/data").headers["etag"] == r.headers["etag"]


def test_write_failure_returns_generic_500(client, monkeypatch, data_file: Path):
    monkeypatch.setattr(DiskScheduleStore, "write", lambda self, doc: False)
    r = client.post("/api/data", json={"meetings": []})
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert str(data_file) not in body["message"]


def test_unexpected_fault_returns_generic_500(client, monkeypatch):
    def boom(self, doc):  # type: ignore[no-untyped-def]
        raise RuntimeError("/secret/path exploded")

    monkeypatch.setattr(DiskScheduleStore, "write", boom)
    r = client.post("/api/data", json={"meetings": []})
    assert r.status_code == 500
    assert "/secret/path" not in r.json()["message"]


def test_slow_write_times_out_with_503(make_client, monkeypatch, data_file: Path):
    original = DiskScheduleStore.write

    def slow(self, doc):  # type: ignore[no-untyped-def]
        time.sleep(1.0)
        return original(self, doc)

    monkeypatch.setattr(DiskScheduleStore, "write", slow)
    c = make_client(request_timeout_seconds=0.2)
    r = c.post("/api/data", json={"meetings": [{"id": "late"}], "staffList": ["A"]})
    assert r.status_code == 503
    assert r.json()["success"] is False

    # The write was not cancelled; it still lands.
    deadline = time.monotonic() + 5
    while time.monotonic() < deadline and not data_file.exists():
        time.sleep(0.05)
    time.sleep(0.1)
    assert DiskScheduleStore(data_file).read() == ScheduleDocument(
        meetings=[{"id": "late"}], staffList=["A"], masterPassword="admin123"
    )


def test_corrupt_storage_still_serves_defaults(client, data_file: Path):
    data_file.parent.mkdir(parents=True, exist_ok=True)
    data_file.write_text('{"meetings": [{"id": 1}', encoding="utf-8")
    r = client.get("/api/data")
    assert r.status_code == 200
    assert r.json()["meetings"] == []


def test_deeply_nested_storage_still_serves_defaults(client, data_file: Path):
    data_file.parent.mkdir(parents=True, exist_ok=True)
    data_file.write_text('{"meetings": ' + "[" * 100000, encoding="utf-8")
    r = client.get("/api/data")
    assert r.status_code == 200
    assert r.json()["staffList"] == list(DEFAULT_STAFF_LIST)


def test_staff_list_inherits_defaults_over_unparsable_storage(client, data_file: Path):
    data_file.parent.mkdir(parents=True, exist_ok=True)
    data_file.write_text("[" * 100000, encoding="utf-8")
    r = client.post("/api/data", json={"meetings": [{"id": 1}]})
    assert r.status_code == 200
    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert stored["staffList"] == list(DEFAULT_STAFF_LIST)
    assert stored["meetings"] == [{"id": 1}]


def test_deeply_nested_body_is_rejected(client, data_file: Path):
    body = '{"meetings": [' + "[" * 100000 + "]" * 100000 + "]}"
    r = client.post("/api/data", content=body.encode("utf-8"), headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert not data_file.exists()
