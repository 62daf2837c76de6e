import json
import os

import pytest

from tournament_wheel.core.exceptions import StoreUnavailableError
from tournament_wheel.services.document_store import InMemoryDocumentStore, JsonFileDocumentStore


@pytest.fixture
def json_store(tmp_path):
    return JsonFileDocumentStore(str(tmp_path), file_names={"teams": "my_teams.json"})


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryDocumentStore()
    return JsonFileDocumentStore(str(tmp_path))


class TestDocumentStoreContract:

    def test_add_then_get(self, store):
        doc_id = store.add("brackets", {"name": "Cup"})
        assert store.get("brackets", doc_id) == {"name": "Cup", "id": doc_id}

    def test_ids_are_unique(self, store):
        first = store.add("brackets", {"name": "One"})
        second = store.add("brackets", {"name": "Two"})
        assert first != second

    def test_get_missing(self, store):
        assert store.get("brackets", "missing") is None

    def test_set_replaces_whole_document(self, store):
        doc_id = store.add("brackets", {"name": "Cup", "completed": False})
        store.set("brackets", doc_id, {"name": "Renamed"})
        assert store.get("brackets", doc_id) == {"name": "Renamed", "id": doc_id}

    def test_set_creates_document(self, store):
        store.set("teams", "t1", {"name": "Alpha"})
        assert store.get("teams", "t1") == {"name": "Alpha", "id": "t1"}

    def test_delete(self, store):
        doc_id = store.add("brackets", {"name": "Cup"})
        assert store.delete("brackets", doc_id) is True
        assert store.get("brackets", doc_id) is None
        assert store.delete("brackets", doc_id) is False

    def test_list_keeps_insertion_order(self, store):
        store.set("teams", "t2", {"name": "Beta"})
        store.set("teams", "t1", {"name": "Alpha"})
        assert [d["id"] for d in store.list("teams")] == ["t2", "t1"]
        assert store.list("brackets") == []

    def test_returned_documents_are_copies(self, store):
        doc_id = store.add("brackets", {"matchups": [{"winner": None}]})
        doc = store.get("brackets", doc_id)
        doc["matchups"][0]["winner"] = "A"
        assert store.get("brackets", doc_id)["matchups"][0]["winner"] is None

    def test_set_if_revision_writes_on_match(self, store):
        doc_id = store.add("brackets", {"name": "Cup", "revision": 1})
        assert store.set_if_revision("brackets", doc_id, {"name": "Renamed", "revision": 2}, 1) == 1
        assert store.get("brackets", doc_id) == {"name": "Renamed", "revision": 2, "id": doc_id}

    def test_set_if_revision_keeps_document_on_mismatch(self, store):
        doc_id = store.add("brackets", {"name": "Cup", "revision": 3})
        assert store.set_if_revision("brackets", doc_id, {"name": "Stale", "revision": 2}, 1) == 3
        assert store.get("brackets", doc_id)["name"] == "Cup"

    def test_set_if_revision_missing_document_counts_as_zero(self, store):
        assert store.set_if_revision("brackets", "b1", {"name": "New", "revision": 1}, 0) == 0
        assert store.get("brackets", "b1")["name"] == "New"
        assert store.set_if_revision("brackets", "b2", {"name": "Ghost"}, 4) == 0
        assert store.get("brackets", "b2") is None

    def test_server_timestamp_uses_clock(self, fixed_now):
        assert InMemoryDocumentStore(clock=lambda: fixed_now).server_timestamp() == fixed_now


class TestJsonFileDocumentStore:

    def test_collection_file_names(self, json_store, tmp_path):
        json_store.set("teams", "t1", {"name": "Alpha"})
        json_store.add("brackets", {"name": "Cup"})

        assert (tmp_path / "my_teams.json").exists()
        assert (tmp_path / "brackets.json").exists()
        with open(tmp_path / "my_teams.json") as f:
            assert json.load(f) == [{"name": "Alpha", "id": "t1"}]

    def test_no_temporary_files_left(self, json_store, tmp_path):
        for i in range(3):
            json_store.add("brackets", {"name": f"Cup {i}"})
        assert sorted(os.listdir(tmp_path)) == ["brackets.json"]

    def test_empty_file_is_empty_collection(self, json_store, tmp_path):
        (tmp_path / "brackets.json").write_text("")
        assert json_store.list("brackets") == []

    def test_corrupted_file_is_reported(self, json_store, tmp_path):
        (tmp_path / "brackets.json").write_text("{not json")
        with pytest.raises(StoreUnavailableError, match="Could not decode JSON"):
            json_store.list("brackets")
        with pytest.raises(StoreUnavailableError):
            json_store.get("brackets", "any")

    def test_non_list_file_is_reported(self, json_store, tmp_path):
        (tmp_path / "brackets.json").write_text('{"id": "x"}')
        with pytest.raises(StoreUnavailableError, match="does not hold a list"):
            json_store.list("brackets")

    def test_data_survives_new_store_instance(self, json_store, tmp_path):
        doc_id = json_store.add("brackets", {"name": "Cup"})
        reopened = JsonFileDocumentStore(str(tmp_path), file_names={"teams": "my_teams.json"})
        assert reopened.get("brackets", doc_id)["name"] == "Cup"

    def test_creates_data_directory(self, tmp_path):
        data_dir = tmp_path / "nested" / "data"
        JsonFileDocumentStore(str(data_dir))
        assert data_dir.is_dir()
