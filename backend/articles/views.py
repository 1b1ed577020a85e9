from django.http import JsonResponse
from django.shortcuts import get_object_or_404, render

from htmlcache.tracking import depends_on

from .models import Article


def article_list(request):
    # Registered before the query so a save landing mid-render still invalidates this page
    depends_on(Article, request=request)
    articles = list(Article.objects.filter(published=True))
    depends_on(*articles, request=request)
    return render(request, "articles/article_list.html", {"articles": articles})


def article_detail(request, slug):
    article = get_object_or_404(Article, slug=slug, published=True)
    depends_on(article, request=request)
    return render(request, "articles/article_detail.html", {"article": article})


def article_json(request, slug):
    article = get_object_or_404(Article, slug=slug, published=True)
    depends_on(article, request=request)
    return JsonResponse(article.to_dict())
