from django import template

from htmlcache.tracking import depends_on

register = template.Library()


@register.simple_tag(takes_context=True)
def cache_depends_on(context, *units):
    """Report the content units this template renders to the page cache; renders nothing."""
    depends_on(*units, request=context.get("request"))
    return ""
