"""Read-time orderings of the article set."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence, TypeVar

from .categories import Category


class Rankable(Protocol):
    id: int
    category: str
    view_count: int
    created_at: datetime


RankableT = TypeVar("RankableT", bound=Rankable)

TRENDING_HEAD_SIZE = 15
DIVERSITY_CATEGORIES: tuple[Category, ...] = (
    Category.NIFTY,
    Category.BREAKOUT,
    Category.IPO,
    Category.RESEARCH_REPORT,
    Category.MOVERS,
)
DIVERSITY_PER_CATEGORY = 2
DIVERSITY_OTHERS_QUOTA = 5

FEED_CATEGORY_ORDER: tuple[Category, ...] = (
    Category.NIFTY,
    Category.BREAKOUT,
    Category.IPO,
    Category.SME_IPO,
    Category.WARRANT,
)


def _recency_key(article: Rankable) -> tuple[float, int]:
    return (-article.created_at.timestamp(), article.id)


def _popularity_key(article: Rankable) -> tuple[int, float, int]:
    return (-(article.view_count or 0), -article.created_at.timestamp(), article.id)


def rank_trending(
    articles: Sequence[RankableT],
    *,
    head_size: int = TRENDING_HEAD_SIZE,
    per_category: int = DIVERSITY_PER_CATEGORY,
    others_quota: int = DIVERSITY_OTHERS_QUOTA,
) -> list[RankableT]:
    """Most viewed articles first, then a category-diverse tail.

    The head is the ``head_size`` articles with the most views (newest first
    on ties). The tail draws at most ``per_category`` of the remainder from
    each priority category and ``others_quota`` from everything else, keeping
    the popularity order inside each bucket.
    """
    ordered = sorted(articles, key=_popularity_key)
    head = ordered[:head_size]
    remainder = ordered[head_size:]

    priority = [category.value for category in DIVERSITY_CATEGORIES]
    buckets: dict[str, list[RankableT]] = {name: [] for name in priority}
    others: list[RankableT] = []
    for article in remainder:
        bucket = buckets.get(str(article.category))
        if bucket is None:
            if len(others) < others_quota:
                others.append(article)
        elif len(bucket) < per_category:
            bucket.append(article)

    tail: list[RankableT] = []
    for name in priority:
        tail.extend(buckets[name])
    tail.extend(others)
    return head + tail


def feed_order(articles: Sequence[RankableT]) -> list[RankableT]:
    """Group the unfiltered feed by the fixed category order, newest first within groups."""
    rank = {category.value: index for index, category in enumerate(FEED_CATEGORY_ORDER)}
    fallback = len(FEED_CATEGORY_ORDER)
    return sorted(
        articles,
        key=lambda article: (rank.get(str(article.category), fallback), *_recency_key(article)),
    )


__all__ = [
    "TRENDING_HEAD_SIZE",
    "DIVERSITY_CATEGORIES",
    "FEED_CATEGORY_ORDER",
    "rank_trending",
    "feed_order",
]
