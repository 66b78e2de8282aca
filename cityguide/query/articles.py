"""Article queries for the explore section."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from cityguide.schemas.content import ALL_FILTER, Article


@dataclass(frozen=True)
class ArticleQuery:
    """Explore filter state. ``type`` matches case-insensitively."""

    search_text: str = ""
    type: str = ALL_FILTER


def matches_article(article: Article, query: ArticleQuery) -> bool:
    needle = query.search_text.lower()
    if needle and needle not in (article.title or "").lower():
        return False
    if query.type != ALL_FILTER and (article.type or "").lower() != query.type.lower():
        return False
    return True


def query_articles(articles: Iterable[Article], query: ArticleQuery) -> List[Article]:
    """Filter articles; featured first, otherwise input order."""
    return sorted((a for a in articles if matches_article(a, query)), key=lambda a: not a.featured)


def find_by_slug(articles: Iterable[Article], slug: str) -> Optional[Article]:
    for article in articles:
        if article.slug == slug:
            return article
    return None


def related_articles(articles: Iterable[Article], selected: Article, limit: int = 4) -> List[Article]:
    """
    Articles under the same pillar as ``selected``.

    That is the parent pillar itself plus its siblings. An article without
    a parent has none. The selected article is never included.
    """
    parent = selected.parent_slug
    if not parent:
        return []
    related = [a for a in articles if a.slug == parent or a.parent_slug == parent]
    return [a for a in related if a.id != selected.id][:limit]


def pillar_articles(articles: Iterable[Article], limit: int = 4) -> List[Article]:
    """Pillar articles in held order, for the home page."""
    return [a for a in articles if a.is_pillar][:limit]
