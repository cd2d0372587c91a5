from __future__ import annotations

from cluele.services.io_utils import read_json, write_json
from cluele.services.preferences import PreferencesStore


def test_defaults_when_file_missing(tmp_path):
    store = PreferencesStore(tmp_path / "prefs" / "preferences.json")
    assert store.load() == {"dark_mode": False}


def test_dark_mode_is_persisted(tmp_path):
    path = tmp_path / "prefs" / "preferences.json"
    PreferencesStore(path).set_dark_mode(True)

    assert read_json(path) == {"dark_mode": True}
    assert PreferencesStore(path).load() == {"dark_mode": True}


def test_corrupted_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_bytes(b"{not json")

    assert read_json(path) is None
    assert PreferencesStore(path).load() == {"dark_mode": False}


def test_unknown_keys_are_dropped(tmp_path):
    path = tmp_path / "preferences.json"
    write_json(path, {"dark_mode": 1, "theme": "neon"})

    assert PreferencesStore(path).load() == {"dark_mode": True}
