"""
Tests for history storage backends.
"""
import json

import pytest

from placement.core.history.store import (
    DEFAULT_HISTORY_KEY,
    HistoryCorruptedError,
    InMemoryHistoryStore,
    JsonFileHistoryStore,
)

RECORDS = [{"testId": "test_1"}, {"testId": "test_2"}]


class TestInMemoryHistoryStore:
    """Tests for InMemoryHistoryStore."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = InMemoryHistoryStore()

    def test_get_when_empty(self):
        assert self.store.get_raw_history() is None

    def test_set_and_get(self):
        self.store.set_raw_history(RECORDS)

        assert self.store.get_raw_history() == RECORDS

    def test_set_stores_a_copy(self):
        """Test that later changes to the caller's list are not visible."""
        records = list(RECORDS)
        self.store.set_raw_history(records)
        records.append({"testId": "test_3"})

        assert len(self.store.get_raw_history()) == 2

    def test_clear(self):
        self.store.set_raw_history(RECORDS)
        self.store.clear()

        assert self.store.get_raw_history() is None

    def test_get_returns_a_copy(self):
        """Test that changes to the returned list are not written back."""
        self.store.set_raw_history(RECORDS)

        self.store.get_raw_history().append({"testId": "test_3"})

        assert self.store.get_raw_history() == RECORDS

    def test_clear_when_empty(self):
        self.store.clear()  # Should not raise


class TestJsonFileHistoryStore:
    """Tests for JsonFileHistoryStore."""

    def test_missing_file_is_empty(self, history_path):
        store = JsonFileHistoryStore(history_path)

        assert store.get_raw_history() is None
        assert not history_path.exists()

    def test_set_creates_file_and_parents(self, history_path):
        store = JsonFileHistoryStore(history_path)

        store.set_raw_history(RECORDS)

        assert json.loads(history_path.read_text()) == {DEFAULT_HISTORY_KEY: RECORDS}
        assert store.get_raw_history() == RECORDS

    def test_survives_new_instance(self, history_path):
        JsonFileHistoryStore(history_path).set_raw_history(RECORDS)

        assert JsonFileHistoryStore(history_path).get_raw_history() == RECORDS

    def test_custom_key(self, history_path):
        store = JsonFileHistoryStore(history_path, key="results_v2")
        store.set_raw_history(RECORDS)

        assert "results_v2" in json.loads(history_path.read_text())
        assert JsonFileHistoryStore(history_path).get_raw_history() is None

    def test_other_keys_preserved(self, history_path):
        """Test that writing history keeps unrelated keys in the document."""
        history_path.parent.mkdir(parents=True)
        history_path.write_text(json.dumps({"preferences": {"theme": "dark"}}))
        store = JsonFileHistoryStore(history_path)

        store.set_raw_history(RECORDS)

        document = json.loads(history_path.read_text())
        assert document["preferences"] == {"theme": "dark"}
        assert document[DEFAULT_HISTORY_KEY] == RECORDS

    def test_no_temp_files_left(self, history_path):
        store = JsonFileHistoryStore(history_path)
        store.set_raw_history(RECORDS)
        store.set_raw_history(RECORDS[:1])

        assert [p.name for p in history_path.parent.iterdir()] == [history_path.name]

    def test_empty_file_is_empty(self, history_path):
        history_path.parent.mkdir(parents=True)
        history_path.write_text("  \n")

        assert JsonFileHistoryStore(history_path).get_raw_history() is None

    def test_invalid_json_raises(self, history_path):
        history_path.parent.mkdir(parents=True)
        history_path.write_text("{not json")

        with pytest.raises(HistoryCorruptedError, match="not valid JSON"):
            JsonFileHistoryStore(history_path).get_raw_history()

    def test_invalid_utf8_raises(self, history_path):
        """Test that undecodable bytes surface as HistoryCorruptedError."""
        history_path.parent.mkdir(parents=True)
        history_path.write_bytes(b'{"test_results": ["\xff\xfe"]}')

        with pytest.raises(HistoryCorruptedError, match="Cannot read history file"):
            JsonFileHistoryStore(history_path).get_raw_history()

    def test_set_overwrites_undecodable_file(self, history_path):
        history_path.parent.mkdir(parents=True)
        history_path.write_bytes(b"\xff\xfe")
        store = JsonFileHistoryStore(history_path)

        store.set_raw_history(RECORDS)

        assert store.get_raw_history() == RECORDS

    def test_non_object_document_raises(self, history_path):
        history_path.parent.mkdir(parents=True)
        history_path.write_text(json.dumps(RECORDS))

        with pytest.raises(HistoryCorruptedError, match="must contain a JSON object"):
            JsonFileHistoryStore(history_path).get_raw_history()

    def test_set_overwrites_corrupted_file(self, history_path):
        history_path.parent.mkdir(parents=True)
        history_path.write_text("{not json")
        store = JsonFileHistoryStore(history_path)

        store.set_raw_history(RECORDS)

        assert store.get_raw_history() == RECORDS

    def test_clear_removes_file(self, history_path):
        store = JsonFileHistoryStore(history_path)
        store.set_raw_history(RECORDS)

        store.clear()

        assert not history_path.exists()
        assert store.get_raw_history() is None

    def test_clear_keeps_other_keys(self, history_path):
        history_path.parent.mkdir(parents=True)
        history_path.write_text(
            json.dumps({"preferences": {"theme": "dark"}, DEFAULT_HISTORY_KEY: RECORDS})
        )

        JsonFileHistoryStore(history_path).clear()

        assert json.loads(history_path.read_text()) == {"preferences": {"theme": "dark"}}

    def test_clear_corrupted_file(self, history_path):
        history_path.parent.mkdir(parents=True)
        history_path.write_text("{not json")

        JsonFileHistoryStore(history_path).clear()

        assert not history_path.exists()

    def test_clear_missing_file(self, history_path):
        JsonFileHistoryStore(history_path).clear()  # Should not raise
