"""
Configuration resolution for the HTML page cache.

The middleware resolves one ``PageCacheConfig`` value per request and passes it
explicitly to the eligibility gate and the page cache service. Sources, in
order of precedence for the cache duration:

1. ``settings.json`` sidecar file in the cache directory (``{"cacheDuration": N}``)
2. ``HtmlCacheSettings`` database record
3. ``HTMLCACHE_DURATION`` Django setting
4. ``DEFAULT_CACHE_DURATION`` (3600 seconds)
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from django.conf import settings
from django.db import DatabaseError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DURATION = 3600
SIDECAR_FILENAME = "settings.json"


@dataclass(frozen=True)
class PageCacheConfig:
    """Resolved configuration for one request."""

    enabled: bool = True
    force_on: bool = False
    cache_duration: int = DEFAULT_CACHE_DURATION
    debug: bool = False
    system_on: bool = True


def get_cache_directory() -> Path:
    """
    Return the directory holding cache bodies.

    Uses ``HTMLCACHE_DIRECTORY`` when set, otherwise
    ``<STORAGE_PATH or BASE_DIR/storage>/runtime/htmlcache``.
    """
    directory = getattr(settings, "HTMLCACHE_DIRECTORY", None)
    if directory:
        return Path(directory)

    base_path = getattr(settings, "STORAGE_PATH", None) or Path(settings.BASE_DIR) / "storage"
    return Path(base_path) / "runtime" / "htmlcache"


def positive_int_or_none(value):
    """Return ``value`` as a positive int, or None if it isn't one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    if number <= 0:
        return None
    return number


def read_sidecar_duration(directory: Path):
    """Read ``cacheDuration`` from the sidecar settings file, if any."""
    sidecar = Path(directory) / SIDECAR_FILENAME
    try:
        with sidecar.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.warning(f"Cache config - operation=read_sidecar, path={sidecar}, error={e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Cache config - operation=read_sidecar, path={sidecar}, error=not an object")
        return None

    duration = positive_int_or_none(data.get("cacheDuration"))
    if duration is None and "cacheDuration" in data:
        logger.warning(
            f"Cache config - operation=read_sidecar, path={sidecar}, "
            f"error=invalid cacheDuration {data.get('cacheDuration')!r}"
        )
    return duration


def write_sidecar_duration(directory: Path, cache_duration: int) -> Path:
    """Write the sidecar settings file overriding the cache duration."""
    duration = positive_int_or_none(cache_duration)
    if duration is None:
        raise ValueError(f"cache_duration must be a positive integer, got {cache_duration!r}")

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    sidecar = directory / SIDECAR_FILENAME
    sidecar.write_text(json.dumps({"cacheDuration": duration}), encoding="utf-8")
    return sidecar


def _load_settings_record():
    from htmlcache.models import HtmlCacheSettings

    try:
        return HtmlCacheSettings.get_solo()
    except DatabaseError as e:
        logger.error(f"Cache config - operation=load_settings_record, error={e}", exc_info=True)
        return None


def load_config(use_database: bool = True) -> PageCacheConfig:
    """
    Resolve the page cache configuration from Django settings, the settings
    record and the sidecar file.

    ``HTMLCACHE_ENABLED=False`` switches the cache off regardless of the
    record; ``HTMLCACHE_FORCE_ON=True`` forces it on regardless of the record.
    """
    record = _load_settings_record() if use_database else None

    enabled = bool(getattr(settings, "HTMLCACHE_ENABLED", True))
    force_on = bool(getattr(settings, "HTMLCACHE_FORCE_ON", False))
    if record is not None:
        enabled = enabled and record.enabled
        force_on = force_on or record.force_on

    cache_duration = read_sidecar_duration(get_cache_directory())
    if cache_duration is None and record is not None:
        cache_duration = positive_int_or_none(record.cache_duration)
    if cache_duration is None:
        cache_duration = positive_int_or_none(getattr(settings, "HTMLCACHE_DURATION", None))
    if cache_duration is None:
        cache_duration = DEFAULT_CACHE_DURATION

    maintenance = getattr(
        settings,
        "HTMLCACHE_MAINTENANCE_MODE",
        getattr(settings, "MAINTENANCE_MODE", False),
    )

    return PageCacheConfig(
        enabled=enabled,
        force_on=force_on,
        cache_duration=cache_duration,
        debug=bool(getattr(settings, "DEBUG", False)),
        system_on=not bool(maintenance),
    )
