"""Repository utilities for interacting with persisted articles and user lists."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from .mapping import ArticleDraft
from .models import Article, ArticleView, Bookmark, ReadLaterEntry, SyncState, utcnow


# Fields a resync may overwrite. view_count, created_at and the translation
# cache are deliberately absent.
SYNCED_FIELDS = (
    "title",
    "content",
    "category",
    "stock_symbol",
    "stock_price",
    "price_change",
    "exchange",
    "price_target",
    "image_url",
    "time_ago",
    "is_premium",
    "source",
    "sentiment",
)

PairingModel = TypeVar("PairingModel", Bookmark, ReadLaterEntry)


def get_sync_state(session: Session) -> SyncState:
    state = session.get(SyncState, 1)
    if state is None:
        state = SyncState(id=1, next_article_id=1, last_synced_at=None)
        session.add(state)
        session.flush()
    return state


def list_articles(session: Session, category: str | None = None) -> list[Article]:
    stmt = select(Article)
    if category is not None:
        stmt = stmt.where(Article.category == category)
    stmt = stmt.order_by(Article.created_at.desc(), Article.id.asc())
    return list(session.execute(stmt).scalars())


def get_article(session: Session, article_id: int) -> Article | None:
    return session.get(Article, article_id)


def count_articles(session: Session) -> int:
    return session.execute(select(func.count(Article.id))).scalar_one()


def replace_articles(
    session: Session, drafts: Sequence[ArticleDraft], *, synced_at: datetime | None = None
) -> tuple[int, int, int]:
    """Make the stored article set equal to ``drafts``.

    Surviving ids are updated in place so their view counts and creation
    times carry over. Returns ``(inserted, updated, removed)``.
    """
    synced_at = synced_at or utcnow()
    incoming_ids = [draft.id for draft in drafts]
    existing = {
        article.id: article
        for article in session.execute(select(Article)).scalars()
    }

    inserted = 0
    updated = 0
    for draft in drafts:
        current = existing.get(draft.id)
        if current is None:
            session.add(_article_from_draft(draft, created_at=synced_at))
            inserted += 1
            continue
        changed = False
        for field in SYNCED_FIELDS:
            new_value = getattr(draft, field)
            if field == "category":
                new_value = draft.category.value
            if new_value != getattr(current, field):
                setattr(current, field, new_value)
                changed = True
        if changed:
            if current.title_hi is not None or current.content_hi is not None:
                # Cached translations belong to the old text.
                current.title_hi = None
                current.content_hi = None
            updated += 1

    removed = 0
    stale_ids = set(existing) - set(incoming_ids)
    if stale_ids:
        result = session.execute(delete(Article).where(Article.id.in_(stale_ids)))
        removed = result.rowcount or 0

    state = get_sync_state(session)
    state.next_article_id = (max(incoming_ids) + 1) if incoming_ids else 1
    state.last_synced_at = synced_at
    session.flush()
    return inserted, updated, removed


def _article_from_draft(draft: ArticleDraft, *, created_at: datetime) -> Article:
    return Article(
        id=draft.id,
        title=draft.title,
        content=draft.content,
        category=draft.category.value,
        stock_symbol=draft.stock_symbol,
        stock_price=draft.stock_price,
        price_change=draft.price_change,
        exchange=draft.exchange,
        price_target=draft.price_target,
        image_url=draft.image_url,
        time_ago=draft.time_ago,
        is_premium=draft.is_premium,
        source=draft.source,
        sentiment=draft.sentiment,
        view_count=0,
        created_at=created_at,
    )


def insert_article(session: Session, draft: ArticleDraft) -> Article:
    article = _article_from_draft(draft, created_at=utcnow())
    session.add(article)
    session.flush()
    return article


def allocate_article_id(session: Session) -> int:
    state = get_sync_state(session)
    highest = session.execute(select(func.max(Article.id))).scalar_one_or_none() or 0
    article_id = max(state.next_article_id, highest + 1)
    state.next_article_id = article_id + 1
    session.flush()
    return article_id


def increment_view_count(session: Session, article_id: int) -> bool:
    stmt = (
        update(Article)
        .where(Article.id == article_id)
        .values(view_count=Article.view_count + 1)
    )
    result = session.execute(stmt)
    return bool(result.rowcount)


def store_translation(session: Session, article_id: int, title_hi: str, content_hi: str) -> None:
    session.execute(
        update(Article)
        .where(Article.id == article_id)
        .values(title_hi=title_hi, content_hi=content_hi)
    )


def find_pairing(
    session: Session, model: type[PairingModel], user_id: int, article_id: int
) -> PairingModel | None:
    stmt = (
        select(model)
        .where(model.user_id == user_id, model.article_id == article_id)
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none()


def add_pairing(
    session: Session, model: type[PairingModel], user_id: int, article_id: int
) -> tuple[PairingModel, bool]:
    existing = find_pairing(session, model, user_id, article_id)
    if existing is not None:
        return existing, False
    entry = model(user_id=user_id, article_id=article_id)
    session.add(entry)
    session.flush()
    return entry, True


def remove_pairing(
    session: Session, model: type[PairingModel], user_id: int, article_id: int
) -> bool:
    stmt = delete(model).where(model.user_id == user_id, model.article_id == article_id)
    result = session.execute(stmt)
    return bool(result.rowcount)


def list_pairings(session: Session, model: type[PairingModel], user_id: int) -> list[PairingModel]:
    stmt = select(model).where(model.user_id == user_id).order_by(model.created_at.desc(), model.id.desc())
    return list(session.execute(stmt).scalars())


def record_view(session: Session, article_id: int, session_id: str, time_spent: int) -> ArticleView:
    view = ArticleView(article_id=article_id, session_id=session_id, time_spent=time_spent)
    session.add(view)
    session.flush()
    return view


def delete_everything(session: Session, models: Iterable[type] | None = None) -> int:
    removed = 0
    for model in models or (ArticleView, Bookmark, ReadLaterEntry, Article, SyncState):
        result = session.execute(delete(model))
        removed += result.rowcount or 0
    return removed


__all__ = [
    "SYNCED_FIELDS",
    "get_sync_state",
    "list_articles",
    "get_article",
    "count_articles",
    "replace_articles",
    "insert_article",
    "allocate_article_id",
    "increment_view_count",
    "store_translation",
    "find_pairing",
    "add_pairing",
    "remove_pairing",
    "list_pairings",
    "record_view",
    "delete_everything",
]
