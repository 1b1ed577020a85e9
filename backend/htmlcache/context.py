"""
Explicit request context for the page cache.

The eligibility gate and the page cache service never look at the Django
request directly. The middleware builds one ``RequestContext`` per request and
passes it along, so read and write paths see exactly the same identity and
flags.
"""

from dataclasses import dataclass

from django.conf import settings
from django.contrib.sites.shortcuts import get_current_site
from django.utils.http import urlencode

# Path prefix roots (no leading or trailing slash). Matching allows either the
# exact prefix or the prefix followed by a slash (e.g. 'admin' or 'admin/...').
DEFAULT_ADMIN_PREFIXES = ("admin",)
DEFAULT_ACTION_PREFIXES = ("actions", "api")

ACTION_PARAM = "action"
PREVIEW_PARAMS = ("preview", "live-preview")
PREVIEW_HEADER = "X-Preview"


def normalize_uri(path: str, query) -> str:
    """
    Build the cache uri from a request path and its query parameters.

    Keys are sorted so that ``?b=2&a=1`` and ``?a=1&b=2`` share an entry; the
    values of a repeated key keep their order.
    """
    uri = path or "/"
    if not query:
        return uri

    pairs = sorted(query.lists(), key=lambda item: item[0])
    encoded = urlencode(pairs, doseq=True)
    return f"{uri}?{encoded}" if encoded else uri


def resolve_site_id(request) -> int:
    """Return the id of the site serving ``request``."""
    site = get_current_site(request)
    # RequestSite (sites framework not installed) carries no id
    site_id = getattr(site, "pk", None)
    if site_id is None:
        site_id = getattr(settings, "SITE_ID", 1)
    return int(site_id)


def _matches_prefix(path: str, prefixes) -> bool:
    path = (path or "").lstrip("/")
    for prefix in prefixes:
        prefix = prefix.strip("/")
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


@dataclass(frozen=True)
class RequestIdentity:
    """(uri, site_id) pair identifying one cacheable resource."""

    uri: str
    site_id: int

    @classmethod
    def from_request(cls, request) -> "RequestIdentity":
        return cls(uri=normalize_uri(request.path, request.GET), site_id=resolve_site_id(request))

    def __str__(self):
        return f"site_id={self.site_id}, uri={self.uri}"


@dataclass(frozen=True)
class RequestContext:
    """Everything the eligibility gate needs to know about a request."""

    method: str
    identity: RequestIdentity
    is_admin: bool = False
    is_action: bool = False
    is_preview: bool = False
    is_authenticated: bool = False

    @classmethod
    def from_request(cls, request) -> "RequestContext":
        admin_prefixes = getattr(settings, "HTMLCACHE_ADMIN_PREFIXES", DEFAULT_ADMIN_PREFIXES)
        action_prefixes = getattr(settings, "HTMLCACHE_ACTION_PREFIXES", DEFAULT_ACTION_PREFIXES)
        path = request.path_info or request.path

        user = getattr(request, "user", None)

        return cls(
            method=(request.method or "").upper(),
            identity=RequestIdentity.from_request(request),
            is_admin=_matches_prefix(path, admin_prefixes),
            is_action=_matches_prefix(path, action_prefixes) or ACTION_PARAM in request.GET,
            is_preview=(
                any(param in request.GET for param in PREVIEW_PARAMS)
                or PREVIEW_HEADER in request.headers
            ),
            is_authenticated=bool(user is not None and user.is_authenticated),
        )
