from pathlib import Path

import pytest
from hypothesis import HealthCheck
from hypothesis import settings as hypothesis_settings

from htmlcache.metrics import cache_metrics

# The autouse fixture below is function scoped; hypothesis examples share it on purpose
hypothesis_settings.register_profile(
    "content_site",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
hypothesis_settings.load_profile("content_site")


@pytest.fixture(autouse=True)
def _isolated_htmlcache(settings, tmp_path):
    settings.HTMLCACHE_DIRECTORY = str(tmp_path / "htmlcache")
    settings.HTMLCACHE_ENABLED = True
    settings.HTMLCACHE_FORCE_ON = False
    settings.HTMLCACHE_DURATION = 3600
    settings.HTMLCACHE_MAINTENANCE_MODE = False
    cache_metrics.reset()
    yield
    cache_metrics.reset()


@pytest.fixture
def cache_dir(settings) -> Path:
    return Path(settings.HTMLCACHE_DIRECTORY)
