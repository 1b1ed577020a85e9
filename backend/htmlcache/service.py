"""
Page cache service: the read and write paths of the request interceptor.

Read path:  find entry -> check body age -> serve body, or start a capture.
Write path: re-check eligibility -> re-find entry -> store captured body.

The service treats entry creation (metadata + old body teardown) as one
compound operation and absorbs every cache failure: a broken cache degrades to
an uncached response, never to an error page.
"""

import json
import logging
from typing import Optional

from django.http import HttpResponse

from htmlcache.conf import PageCacheConfig, get_cache_directory
from htmlcache.context import RequestContext, RequestIdentity
from htmlcache.exceptions import CacheBodyNotFound, InconsistentState, MalformedBody, WriteError
from htmlcache.gate import rejection_reason
from htmlcache.index import CacheIndex
from htmlcache.metrics import cache_metrics
from htmlcache.models import CacheEntry
from htmlcache.store import CacheStore
from htmlcache.tracking import CaptureState, activate, deactivate

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"
CACHE_STATUS_HEADER = "X-HtmlCache"


def parse_json_body(body: bytes):
    """
    Parse a body that starts like JSON.

    Raises:
        MalformedBody: If the body is not valid JSON
    """
    try:
        return json.loads(body)
    except ValueError as e:
        raise MalformedBody(f"Body starts like JSON but does not parse: {e}") from e


def detect_content_type(body: bytes) -> str:
    """
    Infer the content type of a stored body from its first byte.

    Bodies starting with ``[`` or ``{`` that parse as JSON are served as
    ``application/json``; everything else is served as HTML.
    """
    if body[:1] not in (b"[", b"{"):
        return HTML_CONTENT_TYPE
    try:
        parse_json_body(body)
    except MalformedBody as e:
        logger.debug(f"Cache body classified as markup - operation=detect_content_type, reason={e}")
        return HTML_CONTENT_TYPE
    return JSON_CONTENT_TYPE


class PageCacheService:
    """
    Orchestrates the cache store and the cache index for one request.

    Example Usage:
        >>> service = PageCacheService.from_settings()
        >>> response = service.serve_cached(context, config)
        >>> if response is None:
        ...     capture = service.start_capture(request, context)
        ...     response = view(request)
        ...     service.end_capture(request)
        ...     response = service.finish_capture(capture, response, config)
    """

    def __init__(self, store: CacheStore, index: Optional[CacheIndex] = None, metrics=None):
        self.store = store
        self.index = index or CacheIndex()
        self.metrics = metrics or cache_metrics

    @classmethod
    def from_settings(cls) -> "PageCacheService":
        return cls(store=CacheStore(get_cache_directory()))

    def serve_cached(self, context: RequestContext, config: PageCacheConfig) -> Optional[HttpResponse]:
        """
        Return the cached response for the request, or None on a miss.

        An expired body is deleted; its entry is left in place for the next
        capture to replace. A missing body is an ordinary miss.
        """
        identity = context.identity
        entry = self.index.find_entry(identity)
        if entry is None:
            self.metrics.record('cache_miss')
            logger.debug(f"Cache miss - operation=lookup, {identity}, reason=no_entry")
            return None

        try:
            age = self.store.age_seconds(entry.uid)
        except CacheBodyNotFound:
            self.metrics.record('cache_miss')
            logger.debug(f"Cache miss - operation=lookup, {identity}, uid={entry.uid}, reason=no_body")
            return None

        if age >= config.cache_duration:
            self.store.delete(entry.uid)
            self.metrics.record('cache_expired')
            self.metrics.record('cache_miss')
            logger.info(
                f"Cache expired - operation=lookup, {identity}, uid={entry.uid}, "
                f"age={age}, duration={config.cache_duration}"
            )
            return None

        try:
            with self.metrics.measure_latency('serve_hit'):
                body = self.store.get(entry.uid)
        except CacheBodyNotFound:
            # Deleted by a concurrent invalidation between the age check and the read
            self.metrics.record('cache_miss')
            logger.debug(f"Cache miss - operation=lookup, {identity}, uid={entry.uid}, reason=body_removed")
            return None

        self.metrics.record('cache_hit')
        logger.debug(f"Cache hit - operation=serve_hit, {identity}, uid={entry.uid}, age={age}")
        return self.build_response(body)

    def build_response(self, body: bytes) -> HttpResponse:
        response = HttpResponse(body, content_type=detect_content_type(body))
        response[CACHE_STATUS_HEADER] = "HIT"
        return response

    def start_capture(self, request, context: RequestContext) -> CaptureState:
        """Begin capturing the response of ``request`` and enable dependency tracking."""
        capture = CaptureState(context=context, service=self)
        activate(request, capture)
        return capture

    def end_capture(self, request) -> None:
        deactivate(request)

    def finish_capture(self, capture: CaptureState, response, config: PageCacheConfig):
        """
        Store the captured response body when the request is still cacheable.

        The response is always returned unchanged apart from the cache status
        header; a failed or skipped write only loses the cache entry.
        """
        identity = capture.context.identity

        if getattr(response, "streaming", False):
            self.metrics.record('write_skipped')
            logger.debug(f"Cache write skipped - operation=write, {identity}, reason=streaming_response")
            self.discard_capture(capture)
            return response

        reason = rejection_reason(capture.context, config, response.status_code)
        if reason is not None:
            self.metrics.record('write_skipped')
            logger.debug(
                f"Cache write skipped - operation=write, {identity}, "
                f"status={response.status_code}, reason={reason}"
            )
            self.discard_capture(capture)
            return response

        entry = self.index.find_entry(identity)
        if entry is None:
            error = InconsistentState(f"No cache entry for {identity} after capture")
            self.metrics.record('write_skipped')
            logger.info(f"Cache write skipped - operation=write, reason=no_entry, error={error}")
            return response

        if capture.entry is not None and entry.uid != capture.entry.uid:
            # Invalidated mid-render; the current entry's links don't describe this body
            self.metrics.record('write_skipped')
            logger.info(
                f"Cache write skipped - operation=write, {identity}, reason=capture_replaced, "
                f"captured_uid={capture.entry.uid}, current_uid={entry.uid}"
            )
            return response

        try:
            self.store.put(entry.uid, response.content)
        except WriteError as e:
            self.metrics.record_error('write')
            logger.error(f"Cache error - operation=write, {identity}, uid={entry.uid}, error={e}")
        else:
            self.metrics.record('write')
            logger.debug(f"Cache body stored - operation=write, {identity}, uid={entry.uid}")

        response[CACHE_STATUS_HEADER] = "MISS"
        return response

    def discard_capture(self, capture: CaptureState) -> None:
        """
        Drop the entry created while rendering an aborted capture.

        Used when the view raised or produced an uncacheable response, so no
        entry is left behind for a page that was never stored.
        """
        entry = capture.entry
        if entry is None:
            return

        try:
            self.store.delete(entry.uid)
            self.index.delete_entries([entry.id])
        except Exception as e:
            self.metrics.record_error('discard')
            logger.error(
                f"Cache error - operation=discard, {capture.context.identity}, uid={entry.uid}, error={e}",
                exc_info=True,
            )
        else:
            logger.debug(f"Cache capture discarded - operation=discard, {capture.context.identity}, uid={entry.uid}")
        capture.entry = None

    def create_entry(self, identity: RequestIdentity, depends_on=()) -> CacheEntry:
        """
        Create the entry for ``identity`` with a fresh uid.

        The body of a replaced entry is deleted with it so no body outlives
        its entry.
        """
        previous = self.index.find_entry(identity)
        entry = self.index.create_entry(identity, depends_on)
        if previous is not None and previous.uid != entry.uid:
            self.store.delete(previous.uid)
        return entry
