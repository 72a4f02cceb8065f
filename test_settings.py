import json

import pytest
from settings import EditorSettings, SettingsError, load_settings, save_settings


def test_missing_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "settings.json") == EditorSettings()


def test_round_trip(tmp_path):
    path = tmp_path / "settings.json"
    settings = EditorSettings(theme="Dark", font_family="Menlo", font_size=14,
                              last_database="/data/hotels.db", max_rows=500)
    save_settings(settings, path)
    assert load_settings(path) == settings


def test_malformed_json_gives_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path) == EditorSettings()
    assert "using defaults" in caplog.text


def test_non_object_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(path) == EditorSettings()


def test_wrong_types_and_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "font_size": "huge", "max_rows": True, "last_database": 7,
        "font_family": "Fira Code", "colour": "teal",
    }), encoding="utf-8")
    settings = load_settings(path)
    assert settings.font_size == 12
    assert settings.max_rows == 10000
    assert settings.last_database is None
    assert settings.font_family == "Fira Code"


def test_unknown_theme_falls_back_to_system(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "Solarized"}), encoding="utf-8")
    assert load_settings(path).theme == "System"


def test_non_positive_row_cap_is_reset(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"max_rows": 0}), encoding="utf-8")
    assert load_settings(path).max_rows == 10000


def test_font_size_clamping():
    settings = EditorSettings(font_size=40)
    assert settings.clamped_font_size() == 28
    assert settings.clamped_font_size(3) == 8
    assert settings.clamped_font_size(15) == 15


def test_save_failure_raises_settings_error(tmp_path):
    with pytest.raises(SettingsError):
        save_settings(EditorSettings(), tmp_path)
