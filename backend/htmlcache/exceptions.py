"""
Error taxonomy for the HTML page cache.

None of these errors ever reach the end user: the middleware and the page cache
service catch them, log them and let the response through uncached.
"""


class HtmlCacheError(Exception):
    """Base class for every page cache error."""


class WriteError(HtmlCacheError):
    """A cache body could not be written (permissions, disk full, ...)."""


class CacheBodyNotFound(HtmlCacheError):
    """No cache body is stored under the requested uid."""

    def __init__(self, uid):
        self.uid = uid
        super().__init__(f"No cache body stored for uid={uid}")


class InconsistentState(HtmlCacheError):
    """A capture finished but no cache entry exists for its request identity."""


class MalformedBody(HtmlCacheError):
    """A body that looks like JSON failed to parse as JSON."""
