"""
Eligibility gate deciding whether a request may read or write the page cache.

The same predicate runs on the read path (no status yet) and on the write path
(with the response status), so a request type can never write entries it
would not be allowed to read back, or the other way round.
"""

from typing import Optional

from htmlcache.conf import PageCacheConfig
from htmlcache.context import RequestContext

SAFE_METHOD = "GET"
CACHEABLE_STATUS = 200


def rejection_reason(
    context: RequestContext,
    config: PageCacheConfig,
    status_code: Optional[int] = None,
) -> Optional[str]:
    """
    Return why the request must bypass the cache, or None if it may use it.

    Args:
        context: Request context built by the middleware
        config: Resolved page cache configuration
        status_code: Response status, only known on the write path

    Returns:
        Short reason string (used in log lines), or None when cacheable
    """
    if config.debug and not config.force_on:
        return "debug_mode"
    if not config.enabled:
        return "disabled"
    if not config.system_on and not config.force_on:
        return "maintenance_mode"
    if context.is_admin:
        return "admin_request"
    if context.is_action:
        return "action_request"
    if context.is_preview:
        return "preview_request"
    if context.method != SAFE_METHOD:
        return "unsafe_method"
    if context.is_authenticated:
        return "authenticated"
    if status_code is not None and status_code != CACHEABLE_STATUS:
        return "status_not_cacheable"
    return None


def is_cacheable(
    context: RequestContext,
    config: PageCacheConfig,
    status_code: Optional[int] = None,
) -> bool:
    """Pure predicate: True when the request may read (or, with a status, write) the cache."""
    return rejection_reason(context, config, status_code) is None
