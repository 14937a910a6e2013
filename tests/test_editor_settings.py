"""
Tests for EditorConfig validation and SettingsStore persistence.
"""

import json
import logging

import pytest

from exam_drafter.config import EditorConfig, SettingsStore, load_config


class TestEditorConfig:
    def test_defaults(self):
        config = EditorConfig()

        assert config.auto_save_interval == 30.0
        assert config.draft_max_age_days == 7.0
        assert config.draft_key == "criar-prova-draft"
        assert config.export_prefix == "prova-wordwise"
        assert config.editor_snapshot_key == "editor-prova-5-latest"

    @pytest.mark.parametrize("kwargs", [
        {"auto_save_interval": 0},
        {"form_debounce": -1},
        {"draft_max_age_days": 0},
        {"draft_key": ""},
        {"preview_key": "criar-prova-draft"},
        {"export_prefix": ""},
    ])
    def test_when_invalid_then_raises(self, kwargs):
        with pytest.raises(ValueError):
            EditorConfig(**kwargs)


class TestSettingsStore:
    def test_when_file_missing_then_defaults(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")

        assert store.load_config() == EditorConfig()
        assert store.load_error is None

    def test_when_saved_then_reloaded(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        config = EditorConfig(auto_save_interval=10.0, export_prefix="simulado")

        SettingsStore(path).save_config(config)

        assert SettingsStore(path).load_config() == config

    def test_when_file_corrupt_then_defaults_and_warning(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            store = SettingsStore(path)

        assert store.load_error is not None
        assert store.load_config() == EditorConfig()
        assert "using defaults" in caplog.text

    def test_when_value_has_wrong_type_then_that_value_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({
            "auto_save_interval": "fast",
            "form_debounce": 2,
            "draft_key": 5,
            "unknown": True,
        }), encoding="utf-8")

        config = SettingsStore(path).load_config()

        assert config.auto_save_interval == 30.0
        assert config.form_debounce == 2.0
        assert isinstance(config.form_debounce, float)
        assert config.draft_key == "criar-prova-draft"

    def test_when_values_fail_validation_then_all_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"auto_save_interval": -5, "export_prefix": "x"}), encoding="utf-8")

        assert SettingsStore(path).load_config() == EditorConfig()

    def test_when_bool_given_for_number_then_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"auto_save_interval": True}), encoding="utf-8")

        assert SettingsStore(path).load_config().auto_save_interval == 30.0


def test_load_config_without_path_returns_defaults():
    assert load_config() == EditorConfig()
