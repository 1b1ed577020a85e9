"""
Dependency tracking for pages being captured.

While the middleware captures a response, views and templates report the
content units the page is rendered from. The first report creates the cache
entry for the request identity (replacing any previous one); later reports add
dependency links to it. Pages that never report anything are not stored.

Usage from a view:

    from htmlcache.tracking import depends_on

    def article_detail(request, slug):
        article = get_object_or_404(Article, slug=slug)
        depends_on(article, request=request)
        ...

Usage from a template:

    {% load htmlcache_tags %}
    {% cache_depends_on article %}
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from htmlcache.context import RequestContext
from htmlcache.index import content_unit_key
from htmlcache.models import CacheEntry

logger = logging.getLogger(__name__)

REQUEST_ATTRIBUTE = "htmlcache_capture"

_thread_local = threading.local()


@dataclass
class CaptureState:
    """A response capture in progress for one request."""

    context: RequestContext
    service: Any
    entry: Optional[CacheEntry] = None
    content_units: set = field(default_factory=set)


def activate(request, capture: CaptureState) -> None:
    setattr(request, REQUEST_ATTRIBUTE, capture)
    _thread_local.capture = capture


def deactivate(request) -> None:
    if hasattr(request, REQUEST_ATTRIBUTE):
        delattr(request, REQUEST_ATTRIBUTE)
    if hasattr(_thread_local, "capture"):
        del _thread_local.capture


def get_active_capture(request=None) -> Optional[CaptureState]:
    """Return the capture of ``request``, or of the current thread without a request."""
    if request is not None:
        return getattr(request, REQUEST_ATTRIBUTE, None)
    return getattr(_thread_local, "capture", None)


def depends_on(*units, request=None) -> Optional[CacheEntry]:
    """
    Record that the page being rendered depends on ``units``.

    Units may be model instances, model classes, strings or integers (see
    ``content_unit_key``). Outside of an active capture this is a no-op.

    Returns:
        The cache entry of the captured page, or None
    """
    capture = get_active_capture(request)
    if capture is None:
        return None

    keys = {content_unit_key(unit) for unit in units} - capture.content_units
    if capture.entry is not None and not keys:
        return capture.entry

    try:
        if capture.entry is None:
            capture.entry = capture.service.create_entry(capture.context.identity, keys)
        else:
            capture.service.index.add_dependencies(capture.entry, keys)
        capture.content_units |= keys
    except Exception as e:
        logger.error(
            f"Cache error - operation=depends_on, {capture.context.identity}, error={e}",
            exc_info=True,
        )
    return capture.entry
