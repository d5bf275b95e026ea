"""
Tests for the tracker settings.
"""

import json
from pathlib import Path

from combat_tracker.core.config import TrackerSettings, load_settings


def test_defaults_without_file():
    settings = load_settings(None)
    assert settings.lookup_timeout == 10.0
    assert settings.refresh_cache is False
    assert settings.log_tail > 0


def test_load_from_json(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"lookup_timeout": 2.5, "cache_dir": str(tmp_path / "cache")}))
    settings = load_settings(path)
    assert settings.lookup_timeout == 2.5
    assert settings.cache_dir == tmp_path / "cache"


def test_missing_or_invalid_file_falls_back_to_defaults(tmp_path):
    assert load_settings(tmp_path / "nope.json") == TrackerSettings()
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"lookup_timeout": -1}))
    assert load_settings(bad) == TrackerSettings()


def test_with_overrides_ignores_none():
    settings = TrackerSettings().with_overrides(lookup_timeout=3.0, cache_dir=None, refresh_cache=True)
    assert settings.lookup_timeout == 3.0
    assert settings.refresh_cache is True
    assert isinstance(settings.cache_dir, Path)
