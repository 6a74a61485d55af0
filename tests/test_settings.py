from __future__ import annotations

import json
from pathlib import Path

from ficsit.utils.settings import FICSIT_API_URL, Settings, load_settings, save_settings


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    settings = load_settings(str(tmp_path / "settings.json"))
    assert settings == Settings()
    assert settings.ficsit_api_url == FICSIT_API_URL


def test_save_and_load(tmp_path: Path) -> None:
    path = tmp_path / "ficsit" / "settings.json"
    settings = Settings(extra_install_paths=["/srv/satisfactory"], download_retries=5)

    save_settings(settings, str(path))

    assert load_settings(str(path)) == settings


def test_malformed_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{ nope", encoding="utf-8")
    assert load_settings(str(path)) == Settings()

    path.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(str(path)) == Settings()


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"download_timeout": 10.0, "theme": "dark"}), encoding="utf-8")

    settings = load_settings(str(path))

    assert settings.download_timeout == 10.0
    assert not hasattr(settings, "theme")


def test_wrongly_typed_values_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "extra_install_paths": "/opt/games/Satisfactory",
        "sml_cache_dir": 42,
        "ficsit_api_url": "",
        "download_retries": True,
        "download_timeout": "fast",
    }), encoding="utf-8")

    assert load_settings(str(path)) == Settings()


def test_non_string_install_paths_are_dropped(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"extra_install_paths": [42, "/srv/satisfactory", None, ""]}), encoding="utf-8")

    assert load_settings(str(path)).extra_install_paths == ["/srv/satisfactory"]


def test_numeric_settings_are_validated() -> None:
    settings = Settings.from_dict({"download_retries": 5.0, "download_timeout": 30})
    assert settings.download_retries == 5
    assert isinstance(settings.download_retries, int)
    assert settings.download_timeout == 30.0

    assert Settings.from_dict({"download_retries": 0, "download_timeout": -1}) == Settings()
    assert Settings.from_dict({"download_retries": 2.5, "download_timeout": 10 ** 400}) == Settings()
