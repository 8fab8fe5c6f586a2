"""
Tests for the JSON known-id store

Tests cover:
- First-writer-wins recording
- Save/load round trip
- Degraded loading and saving
"""
import json

from mailpull.infrastructure.stores import STORE_FILENAME, JsonKnownIdStore


class TestRecord:
    """Tests for recording and lookup"""

    def test_record_does_not_overwrite(self, tmp_path):
        """Test second record for the same id keeps the first name"""
        store = JsonKnownIdStore(tmp_path)
        assert store.record("u1", "a") is True
        assert store.record("u1", "b") is False
        assert store.get("u1") == "a"
        assert len(store) == 1

    def test_contains(self, tmp_path):
        """Test membership check"""
        store = JsonKnownIdStore(tmp_path)
        store.record("u1", "a")
        assert store.contains("u1")
        assert not store.contains("u2")
        assert store.get("u2") is None

    def test_names(self, tmp_path):
        """Test names returns assigned artifact names"""
        store = JsonKnownIdStore(tmp_path)
        store.record("u1", "a")
        store.record("u2", "b")
        assert store.names() == {"a", "b"}


class TestPersistence:
    """Tests for save and load"""

    def test_round_trip(self, tmp_path):
        """Test saved mapping loads back identically"""
        store = JsonKnownIdStore(tmp_path)
        store.record("u1", "Hello World")
        store.record("u2", "u2")
        assert store.save().ok

        fresh = JsonKnownIdStore(tmp_path)
        assert fresh.load().ok
        assert fresh.as_dict() == {"u1": "Hello World", "u2": "u2"}

    def test_round_trip_empty(self, tmp_path):
        """Test an empty store round trips to an empty store"""
        assert JsonKnownIdStore(tmp_path).save().ok
        fresh = JsonKnownIdStore(tmp_path)
        assert fresh.load().ok
        assert fresh.as_dict() == {}

    def test_saved_file_is_indented_json(self, tmp_path):
        """Test uid.json is human readable"""
        store = JsonKnownIdStore(tmp_path)
        store.record("u1", "a")
        store.save()
        text = (tmp_path / STORE_FILENAME).read_text()
        assert json.loads(text) == {"u1": "a"}
        assert "\n  " in text

    def test_load_missing_file(self, tmp_path):
        """Test missing file is not a failure"""
        store = JsonKnownIdStore(tmp_path)
        outcome = store.load()
        assert outcome.ok
        assert outcome.warning is None
        assert len(store) == 0

    def test_load_keeps_existing_entries(self, tmp_path):
        """Test loading merges without overwriting in-memory entries"""
        (tmp_path / STORE_FILENAME).write_text(json.dumps({"u1": "disk", "u2": "two"}))
        store = JsonKnownIdStore(tmp_path)
        store.record("u1", "memory")
        store.load()
        assert store.as_dict() == {"u1": "memory", "u2": "two"}


class TestDegradedPersistence:
    """Tests for corrupt files and failed writes"""

    def test_load_malformed_json(self, tmp_path):
        """Test malformed JSON degrades to an empty store with a warning"""
        (tmp_path / STORE_FILENAME).write_text("{not json")
        store = JsonKnownIdStore(tmp_path)
        outcome = store.load()
        assert not outcome.ok
        assert STORE_FILENAME in outcome.warning
        assert len(store) == 0

    def test_load_wrong_shape(self, tmp_path):
        """Test a JSON list is rejected"""
        (tmp_path / STORE_FILENAME).write_text("[1, 2]")
        store = JsonKnownIdStore(tmp_path)
        assert not store.load().ok
        assert len(store) == 0

    def test_load_non_string_values(self, tmp_path):
        """Test non-string values are rejected"""
        (tmp_path / STORE_FILENAME).write_text('{"u1": 3}')
        store = JsonKnownIdStore(tmp_path)
        assert not store.load().ok
        assert len(store) == 0

    def test_save_into_missing_directory(self, tmp_path):
        """Test a failed write returns a warning instead of raising"""
        store = JsonKnownIdStore(tmp_path / "gone")
        store.record("u1", "a")
        outcome = store.save()
        assert not outcome.ok
        assert outcome.error
        assert not (tmp_path / "gone").exists()

    def test_save_replaces_previous_file(self, tmp_path):
        """Test save overwrites the old snapshot and leaves no temp file"""
        (tmp_path / STORE_FILENAME).write_text(json.dumps({"old": "x"}))
        store = JsonKnownIdStore(tmp_path)
        store.record("u1", "a")
        store.save()
        assert json.loads((tmp_path / STORE_FILENAME).read_text()) == {"u1": "a"}
        assert [p.name for p in tmp_path.iterdir()] == [STORE_FILENAME]
