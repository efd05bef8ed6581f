import json
from datetime import datetime, timezone

import pytest

from progress_store import (
    SCHEMA_VERSION,
    ProgressStore,
    ProgressStoreError,
    migrate,
)

WHEN = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def test_missing_file_starts_empty(tmp_path):
    store = ProgressStore(str(tmp_path / "progress.json"))
    data = store.load()
    assert data == {"version": SCHEMA_VERSION, "characters": {}}
    assert store.get("ko-kai") is None


def test_record_attempt_persists(tmp_path):
    path = tmp_path / "progress.json"
    store = ProgressStore(str(path))
    store.load()
    store.record_attempt("ko-kai", 70, WHEN)
    entry = store.record_attempt("ko-kai", 55, WHEN)

    assert entry["attempts"] == 2
    assert entry["best_accuracy"] == 70
    assert entry["last_accuracy"] == 55
    assert entry["last_practiced"] == WHEN.isoformat()
    assert [h["accuracy"] for h in entry["history"]] == [70, 55]

    reloaded = ProgressStore(str(path))
    reloaded.load()
    assert reloaded.get("ko-kai") == entry


def test_history_is_bounded(tmp_path):
    store = ProgressStore(str(tmp_path / "progress.json"), history_limit=3)
    for accuracy in range(10, 60, 10):
        store.record_attempt("lo-ling", accuracy, WHEN)
    assert [h["accuracy"] for h in store.get("lo-ling")["history"]] == [30, 40, 50]
    assert store.get("lo-ling")["attempts"] == 5


def test_v1_file_is_migrated(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({
        "version": 1,
        "characters": {"ko-kai": {"attempts": 4, "best_accuracy": 80, "last_practiced": "2026-01-02"}},
    }), encoding="utf-8")

    store = ProgressStore(str(path))
    data = store.load()
    assert data["version"] == 2
    assert data["characters"]["ko-kai"] == {
        "attempts": 4,
        "best_accuracy": 80,
        "last_accuracy": None,
        "last_practiced": "2026-01-02",
        "history": [],
    }


def test_unversioned_document_is_treated_as_v1():
    assert migrate({"characters": {}}) == {"version": 2, "characters": {}}


def test_newer_schema_is_rejected():
    with pytest.raises(ProgressStoreError):
        migrate({"version": SCHEMA_VERSION + 1, "characters": {}})


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_corrupt_file_raises(tmp_path, content):
    path = tmp_path / "progress.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ProgressStoreError):
        ProgressStore(str(path)).load()


@pytest.mark.parametrize("document", [
    {"version": 2},
    {"version": 2, "characters": []},
    {"characters": []},
    {"version": 1, "characters": {"ko-kai": "eleven"}},
    {"version": 2, "characters": {"ko-kai": {"attempts": 1}}},
    {"version": 2, "characters": {"ko-kai": {
        "attempts": 1, "best_accuracy": 50, "last_accuracy": 50,
        "last_practiced": None, "history": "oops"}}},
])
def test_malformed_document_raises_store_error(tmp_path, document):
    path = tmp_path / "progress.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    with pytest.raises(ProgressStoreError):
        ProgressStore(str(path)).load()


def test_failed_save_leaves_no_temp_file(tmp_path):
    path = tmp_path / "progress.json"
    store = ProgressStore(str(path))
    store.data["characters"]["ko-kai"] = {"history": [object()]}

    with pytest.raises(TypeError):
        store.save()
    assert list(tmp_path.iterdir()) == []
