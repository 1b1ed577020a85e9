"""
Tests for page cache configuration resolution.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from htmlcache.conf import (
    DEFAULT_CACHE_DURATION,
    get_cache_directory,
    load_config,
    positive_int_or_none,
    read_sidecar_duration,
    write_sidecar_duration,
)
from htmlcache.models import HtmlCacheSettings


@pytest.mark.parametrize(
    "value, expected",
    [
        (60, 60),
        ("60", 60),
        (60.0, 60),
        (0, None),
        (-5, None),
        (1.5, None),
        ("abc", None),
        (None, None),
        (True, None),
    ],
)
def test_positive_int_or_none(value, expected):
    assert positive_int_or_none(value) == expected


def test_cache_directory_from_setting(settings, tmp_path):
    settings.HTMLCACHE_DIRECTORY = str(tmp_path / "bodies")

    assert get_cache_directory() == tmp_path / "bodies"


def test_cache_directory_defaults_under_storage_path(settings, tmp_path):
    settings.HTMLCACHE_DIRECTORY = None
    settings.STORAGE_PATH = str(tmp_path / "storage")

    assert get_cache_directory() == tmp_path / "storage" / "runtime" / "htmlcache"


def test_cache_directory_defaults_under_base_dir(settings):
    settings.HTMLCACHE_DIRECTORY = None
    settings.STORAGE_PATH = None

    assert get_cache_directory() == Path(settings.BASE_DIR) / "storage" / "runtime" / "htmlcache"


class TestSidecar:
    """The settings.json sidecar in the cache directory."""

    def test_missing_sidecar(self, cache_dir):
        assert read_sidecar_duration(cache_dir) is None

    def test_round_trip(self, cache_dir):
        write_sidecar_duration(cache_dir, 120)

        assert read_sidecar_duration(cache_dir) == 120
        assert json.loads((cache_dir / "settings.json").read_text()) == {"cacheDuration": 120}

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"cacheDuration": 0}', '{"cacheDuration": "x"}', "{}"])
    def test_invalid_sidecar_is_ignored(self, cache_dir, content):
        cache_dir.mkdir(parents=True, exist_ok=True)
        (cache_dir / "settings.json").write_text(content)

        assert read_sidecar_duration(cache_dir) is None

    def test_write_rejects_non_positive_duration(self, cache_dir):
        with pytest.raises(ValueError):
            write_sidecar_duration(cache_dir, 0)


@pytest.mark.django_db
class TestLoadConfig:
    """Resolution of the effective configuration."""

    def test_defaults(self):
        config = load_config()

        assert config.enabled is True
        assert config.force_on is False
        assert config.cache_duration == DEFAULT_CACHE_DURATION
        assert config.debug is False
        assert config.system_on is True

    def test_duration_falls_back_to_default_when_setting_missing(self, settings):
        del settings.HTMLCACHE_DURATION

        assert load_config().cache_duration == 3600

    def test_duration_from_setting(self, settings):
        settings.HTMLCACHE_DURATION = 600

        assert load_config().cache_duration == 600

    def test_invalid_setting_duration_uses_default(self, settings):
        settings.HTMLCACHE_DURATION = 0

        assert load_config().cache_duration == DEFAULT_CACHE_DURATION

    def test_record_duration_overrides_setting(self, settings):
        settings.HTMLCACHE_DURATION = 600
        HtmlCacheSettings.objects.create(singleton_key=1, cache_duration=300)

        assert load_config().cache_duration == 300

    def test_sidecar_overrides_record(self, cache_dir):
        HtmlCacheSettings.objects.create(singleton_key=1, cache_duration=300)
        write_sidecar_duration(cache_dir, 30)

        assert load_config().cache_duration == 30

    def test_record_can_disable(self):
        HtmlCacheSettings.objects.create(singleton_key=1, enabled=False)

        assert load_config().enabled is False

    def test_setting_disable_wins_over_record(self, settings):
        settings.HTMLCACHE_ENABLED = False
        HtmlCacheSettings.objects.create(singleton_key=1, enabled=True)

        assert load_config().enabled is False

    def test_force_on_from_record_or_setting(self, settings):
        HtmlCacheSettings.objects.create(singleton_key=1, force_on=True)
        assert load_config().force_on is True

        HtmlCacheSettings.objects.filter(singleton_key=1).update(force_on=False)
        settings.HTMLCACHE_FORCE_ON = True
        assert load_config().force_on is True

    def test_debug_and_maintenance_mode(self, settings):
        settings.DEBUG = True
        settings.HTMLCACHE_MAINTENANCE_MODE = True

        config = load_config()

        assert config.debug is True
        assert config.system_on is False

    def test_database_error_falls_back_to_settings(self, settings):
        settings.HTMLCACHE_DURATION = 900

        with patch("htmlcache.models.HtmlCacheSettings.get_solo", side_effect=DatabaseError("db down")):
            config = load_config()

        assert config.enabled is True
        assert config.cache_duration == 900

    def test_without_database(self, settings):
        settings.HTMLCACHE_DURATION = 45

        assert load_config(use_database=False).cache_duration == 45
