"""
Full-page cache middleware.

This middleware intercepts requests to:
- Resolve the request context and cache configuration
- Bypass the cache for ineligible requests (admin, actions, previews, POST, ...)
- Serve fresh cached bodies without calling the view
- Capture the view's response on a miss and store it for later requests

The middleware must be positioned after AuthenticationMiddleware in the
MIDDLEWARE list so authenticated requests are recognised and bypassed.
"""

import logging

from htmlcache.conf import load_config
from htmlcache.context import RequestContext
from htmlcache.gate import rejection_reason
from htmlcache.metrics import cache_metrics
from htmlcache.service import PageCacheService

logger = logging.getLogger(__name__)


class HtmlCacheMiddleware:
    """
    Serves and captures full-page responses.

    Request flow:
        gate check -> bypass                  (ineligible request)
        gate check -> lookup -> serve hit     (fresh body, view not called)
        gate check -> lookup -> capture       (miss or expired body)

    Nothing raised by the cache itself escapes this middleware: on any cache
    failure the request is handled as if the cache did not exist. Exceptions
    raised by the view propagate untouched and leave nothing in the cache.

    Example Usage:
        # In Django settings.py MIDDLEWARE list:
        MIDDLEWARE = [
            ...
            'django.contrib.auth.middleware.AuthenticationMiddleware',
            'htmlcache.middleware.HtmlCacheMiddleware',  # Must be after auth
            ...
        ]
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        try:
            config = load_config()
            context = RequestContext.from_request(request)
            service = PageCacheService.from_settings()
        except Exception as e:
            cache_metrics.record_error('request_init')
            logger.error(f"Cache error - operation=request_init, path={request.path}, error={e}", exc_info=True)
            return self.get_response(request)

        reason = rejection_reason(context, config)
        if reason is not None:
            logger.debug(f"Cache bypassed - operation=request_init, reason={reason}, path={request.path}")
            return self.get_response(request)

        try:
            cached = service.serve_cached(context, config)
        except Exception as e:
            cache_metrics.record_error('lookup')
            logger.error(f"Cache error - operation=lookup, {context.identity}, error={e}", exc_info=True)
            return self.get_response(request)

        if cached is not None:
            return cached

        capture = service.start_capture(request, context)
        try:
            response = self.get_response(request)
        except Exception:
            service.discard_capture(capture)
            raise
        finally:
            service.end_capture(request)

        try:
            return service.finish_capture(capture, response, config)
        except Exception as e:
            cache_metrics.record_error('write')
            logger.error(f"Cache error - operation=write, {context.identity}, error={e}", exc_info=True)
            return response
