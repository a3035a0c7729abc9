"""Tests for the shortcut configuration."""

import json

from prinsp.services.config_service import DEFAULT_SHORTCUT, ConfigService


class TestConfigService:
    """Tests for ConfigService."""

    def test_missing_file_created_with_defaults(self, tmp_path):
        path = tmp_path / "prinsp" / "config.json"

        config = ConfigService(path)

        assert config.shortcut == DEFAULT_SHORTCUT == "Ctrl+Shift+A"
        assert json.loads(path.read_text()) == {"shortcut": "Ctrl+Shift+A"}

    def test_loads_saved_shortcut(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"shortcut": "Alt+F1"}))

        assert ConfigService(path).shortcut == "Alt+F1"

    def test_set_shortcut_persists(self, tmp_path):
        path = tmp_path / "config.json"
        config = ConfigService(path)

        assert config.set_shortcut("Ctrl+Alt+P")

        assert ConfigService(path).shortcut == "Ctrl+Alt+P"

    def test_corrupted_file_recreated(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        config = ConfigService(path)

        assert config.shortcut == DEFAULT_SHORTCUT
        assert json.loads(path.read_text()) == {"shortcut": DEFAULT_SHORTCUT}

    def test_wrong_types_treated_as_corrupted(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"shortcut": 42}))

        assert ConfigService(path).shortcut == DEFAULT_SHORTCUT

    def test_non_object_treated_as_corrupted(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(["Ctrl+A"]))

        assert ConfigService(path).shortcut == DEFAULT_SHORTCUT

    def test_empty_shortcut_falls_back_to_default(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"shortcut": ""}))

        assert ConfigService(path).shortcut == DEFAULT_SHORTCUT
