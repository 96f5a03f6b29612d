"""Unit tests for the persistence bridge."""

import json
import logging
from unittest.mock import patch

from clonemaster.core.models import PersistedFields
from clonemaster.core.persistence import PersistenceBridge


class TestLoad:
    """Tests for best-effort loading."""

    def test_missing_file_gives_defaults(self, temp_dir):
        assert PersistenceBridge(temp_dir / "store.json").load() == PersistedFields()

    def test_reads_both_slots(self, temp_dir, subject_url):
        path = temp_dir / "store.json"
        path.write_text(json.dumps({"subjectImage": subject_url, "productBrief": "Curso"}))

        loaded = PersistenceBridge(path).load()

        assert loaded.subject_image == subject_url
        assert loaded.product_brief == "Curso"

    def test_invalid_json_gives_defaults(self, temp_dir):
        path = temp_dir / "store.json"
        path.write_text("{broken")

        assert PersistenceBridge(path).load() == PersistedFields()

    def test_wrong_types_give_defaults(self, temp_dir):
        path = temp_dir / "store.json"
        path.write_text(json.dumps({"subjectImage": 42, "productBrief": ["x"]}))

        assert PersistenceBridge(path).load() == PersistedFields()

    def test_non_object_document(self, temp_dir):
        path = temp_dir / "store.json"
        path.write_text("[]")

        assert PersistenceBridge(path).load() == PersistedFields()


class TestSave:
    """Tests for slot writes."""

    def test_save_and_reload(self, temp_dir, subject_url):
        bridge = PersistenceBridge(temp_dir / "store.json")

        bridge.save_subject_image(subject_url)
        bridge.save_product_brief("Mentoria")

        assert bridge.load() == PersistedFields(subject_image=subject_url, product_brief="Mentoria")

    def test_save_keeps_other_slot(self, temp_dir, subject_url):
        path = temp_dir / "store.json"
        bridge = PersistenceBridge(path)
        bridge.save_subject_image(subject_url)

        bridge.save_product_brief("Mentoria")

        data = json.loads(path.read_text())
        assert data == {"subjectImage": subject_url, "productBrief": "Mentoria"}

    def test_creates_parent_directory(self, temp_dir):
        bridge = PersistenceBridge(temp_dir / "nested" / "store.json")

        bridge.save_product_brief("x")

        assert bridge.load().product_brief == "x"

    def test_write_failure_is_logged_not_raised(self, temp_dir, caplog):
        """Test that storage errors never reach the caller."""
        bridge = PersistenceBridge(temp_dir / "store.json")

        with patch("builtins.open", side_effect=OSError("disk full")):
            with caplog.at_level(logging.WARNING, logger="clonemaster.core.persistence"):
                bridge.save_product_brief("x")

        assert "disk full" in caplog.text
