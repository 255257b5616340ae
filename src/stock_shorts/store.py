"""The article store consumed by the serving layer."""

from __future__ import annotations

import logging
import random
import threading
import time
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import datetime, timedelta
from typing import Any, Mapping

from .categories import Category, is_premium_category
from .config import Settings, get_settings
from .db import Database
from .errors import NotFound, SourceUnavailable
from .filters import is_blank, is_boilerplate
from .images import select_image
from .mapping import ArticleDraft
from .models import Article, ArticleView, Bookmark, ReadLaterEntry, utcnow
from .pipeline import SyncResult, run_sync
from .ranking import feed_order, rank_trending
from .repository import (
    add_pairing,
    allocate_article_id,
    count_articles,
    delete_everything,
    find_pairing,
    get_article,
    get_sync_state,
    increment_view_count,
    insert_article,
    list_articles,
    list_pairings,
    record_view,
    remove_pairing,
    store_translation,
)
from .samples import TEST_ARTICLES, StaticRowSource
from .schemas import ArticleCreate, ArticleViewCreate, UserArticlePayload, validate_payload
from .sheets_client import RowSource, SheetsClient
from .synthesis import synthesize_content
from .translation import Translator


logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


class ArticleStore:
    """Keyed article collection kept in step with the external row source.

    Syncs are serialised by a lock and applied in one transaction, so readers
    see either the previous or the new article set. Reads that find the data
    stale trigger a sync and wait at most ``sync_stale_wait_seconds`` for it.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        source: RowSource | None = None,
        translator: Translator | None = None,
        database: Database | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.database = database or Database(self.settings.sqlite_path)
        self.source = source if source is not None else SheetsClient.from_settings(self.settings)
        self.translator = translator or Translator.from_settings(self.settings)
        self._seed_source = StaticRowSource() if self.settings.seed_sample_articles else None
        self._rng = rng or random.Random()
        self._sync_lock = threading.Lock()
        self._pending_lock = threading.Lock()
        self._pending: Future[SyncResult | None] | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._last_attempt: float | None = None
        self._closed = False

    # Lifecycle

    def init(self) -> "ArticleStore":
        self.database.init_db()
        if self.source is not None:
            self.background_sync()
        if self._seed_source is not None and self.count() == 0:
            logger.info("Article store is empty; loading sample articles")
            with self._sync_lock:
                run_sync(self.database, self._seed_source)
        return self

    def shutdown(self) -> None:
        """Stop accepting syncs, wait for a running one, then release the engine."""
        with self._pending_lock:
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)
        self.database.dispose()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "ArticleStore":
        return self.init()

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    # Sync

    def sync(self) -> SyncResult:
        """Run a sync now; failures are logged and re-raised with the store untouched."""
        if self.source is None:
            raise SourceUnavailable("No content source is configured")
        with self._sync_lock:
            self._last_attempt = time.monotonic()
            try:
                return run_sync(self.database, self.source)
            except SourceUnavailable as exc:
                logger.error("Article sync failed, keeping previous articles: %s", exc)
                raise
            except Exception:
                logger.exception("Article sync aborted while mapping rows")
                raise

    def force_sync(self) -> SyncResult:
        return self.sync()

    def background_sync(self) -> SyncResult | None:
        if self._closed:
            logger.debug("Store is shut down; skipping background sync")
            return None
        try:
            return self.sync()
        except Exception as exc:
            logger.warning("Background sync failed: %s", exc, exc_info=True)
            return None

    def last_synced_at(self) -> datetime | None:
        with self.database.session_scope() as session:
            return get_sync_state(session).last_synced_at

    def is_stale(self) -> bool:
        if self.source is None:
            return False
        interval = timedelta(minutes=self.settings.sync_interval_minutes)
        if self._last_attempt is not None:
            if time.monotonic() - self._last_attempt < interval.total_seconds():
                return False
        with self.database.session_scope() as session:
            if count_articles(session) == 0:
                return True
            last_synced = get_sync_state(session).last_synced_at
        return last_synced is None or utcnow() - last_synced > interval

    def refresh_if_stale(self) -> None:
        if self._closed or not self.is_stale():
            return
        future = self._schedule_sync()
        if future is None:
            return
        wait = self.settings.sync_stale_wait_seconds
        try:
            future.result(timeout=wait)
        except FutureTimeout:
            logger.info("Sync still running after %.1fs; serving current articles", wait)
        except CancelledError:
            logger.debug("Pending sync cancelled by shutdown")

    def _schedule_sync(self) -> Future[SyncResult | None] | None:
        with self._pending_lock:
            if self._closed:
                return None
            if self._pending is not None and not self._pending.done():
                return self._pending
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="article-sync")
            self._pending = self._executor.submit(self.background_sync)
            return self._pending

    # Reads

    def count(self) -> int:
        with self.database.session_scope() as session:
            return count_articles(session)

    def get_articles(self, category: str | None = None) -> list[Article]:
        self.refresh_if_stale()
        if category == Category.TRENDING.value:
            return self.get_trending_articles()
        with self.database.session_scope() as session:
            if category is None or category == ALL_CATEGORIES:
                return feed_order(list_articles(session))
            return list_articles(session, category)

    def get_article(self, article_id: int) -> Article | None:
        with self.database.session_scope() as session:
            return get_article(session, article_id)

    def require_article(self, article_id: int) -> Article:
        article = self.get_article(article_id)
        if article is None:
            raise NotFound(f"Article {article_id} not found")
        return article

    def get_trending_articles(self) -> list[Article]:
        with self.database.session_scope() as session:
            return rank_trending(list_articles(session))

    # Writes

    def create_article(self, fields: Mapping[str, Any] | ArticleCreate) -> Article:
        """Insert an article outside of a sync, deriving id, premium flag and image."""
        payload = validate_payload(ArticleCreate, fields)
        with self.database.session_scope() as session:
            article_id = allocate_article_id(session)
            content = payload.content.strip()
            if is_blank(content) or is_boilerplate(content):
                content = synthesize_content(
                    payload.title,
                    payload.category,
                    payload.stock_symbol,
                    payload.stock_price,
                    payload.price_change,
                    position_index=article_id,
                )
            is_premium = (
                payload.is_premium
                if payload.is_premium is not None
                else is_premium_category(payload.category)
            )
            draft = ArticleDraft(
                id=article_id,
                title=payload.title,
                content=content,
                category=payload.category,
                image_url=select_image(
                    title=payload.title,
                    content=content,
                    category=payload.category,
                    stock_symbol=payload.stock_symbol,
                    article_id=article_id,
                ),
                is_premium=is_premium,
                time_ago=payload.time_ago,
                stock_symbol=payload.stock_symbol,
                stock_price=payload.stock_price,
                price_change=payload.price_change,
                exchange=payload.exchange,
                source=payload.source,
                price_target=payload.price_target,
                sentiment=payload.sentiment,
            )
            article = insert_article(session, draft)
        logger.info("Created article %s in %s", article.id, article.category)
        return article

    def add_test_article(self) -> Article:
        return self.create_article(self._rng.choice(TEST_ARTICLES))

    def increment_view_count(self, article_id: int) -> None:
        with self.database.session_scope() as session:
            if not increment_view_count(session, article_id):
                logger.debug("View for unknown article %s ignored", article_id)

    def record_article_view(self, fields: Mapping[str, Any] | ArticleViewCreate) -> ArticleView:
        payload = validate_payload(ArticleViewCreate, fields)
        with self.database.session_scope() as session:
            return record_view(session, payload.article_id, payload.session_id, payload.time_spent)

    def translate_article(self, article_id: int, target_language: str = "hi") -> tuple[str, str]:
        """Return the translated title and content, caching Hindi results on the article."""
        article = self.require_article(article_id)
        cacheable = target_language == "hi"
        if cacheable and article.title_hi and article.content_hi:
            return article.title_hi, article.content_hi
        title = self.translator.try_translate(article.title, target_language)
        content = self.translator.try_translate(article.content, target_language)
        if title is None or content is None:
            return title or article.title, content or article.content
        if cacheable:
            with self.database.session_scope() as session:
                store_translation(session, article_id, title, content)
        return title, content

    def reset(self) -> int:
        """Remove every article, user list entry and view; the only way view counts drop."""
        with self._sync_lock:
            with self.database.session_scope() as session:
                removed = delete_everything(session)
            self._last_attempt = None
        logger.warning("Store reset: %s rows removed", removed)
        return removed

    # Bookmarks and read-later lists

    def _add_pairing(self, model, fields) -> Bookmark | ReadLaterEntry:
        payload = validate_payload(UserArticlePayload, fields)
        self.require_article(payload.article_id)
        with self.database.session_scope() as session:
            entry, created = add_pairing(session, model, payload.user_id, payload.article_id)
        if not created:
            logger.debug(
                "%s for user %s and article %s already exists",
                model.__name__,
                payload.user_id,
                payload.article_id,
            )
        return entry

    def _remove_pairing(self, model, user_id: int, article_id: int) -> bool:
        with self.database.session_scope() as session:
            return remove_pairing(session, model, user_id, article_id)

    def _has_pairing(self, model, user_id: int, article_id: int) -> bool:
        with self.database.session_scope() as session:
            return find_pairing(session, model, user_id, article_id) is not None

    def _list_pairings(self, model, user_id: int):
        with self.database.session_scope() as session:
            return list_pairings(session, model, user_id)

    def add_bookmark(self, fields: Mapping[str, Any] | UserArticlePayload) -> Bookmark:
        return self._add_pairing(Bookmark, fields)

    def remove_bookmark(self, user_id: int, article_id: int) -> bool:
        return self._remove_pairing(Bookmark, user_id, article_id)

    def is_bookmarked(self, user_id: int, article_id: int) -> bool:
        return self._has_pairing(Bookmark, user_id, article_id)

    def get_bookmarks(self, user_id: int) -> list[Bookmark]:
        return self._list_pairings(Bookmark, user_id)

    def add_to_read_later(self, fields: Mapping[str, Any] | UserArticlePayload) -> ReadLaterEntry:
        return self._add_pairing(ReadLaterEntry, fields)

    def remove_from_read_later(self, user_id: int, article_id: int) -> bool:
        return self._remove_pairing(ReadLaterEntry, user_id, article_id)

    def is_in_read_later(self, user_id: int, article_id: int) -> bool:
        return self._has_pairing(ReadLaterEntry, user_id, article_id)

    def get_read_later(self, user_id: int) -> list[ReadLaterEntry]:
        return self._list_pairings(ReadLaterEntry, user_id)


__all__ = ["ArticleStore", "ALL_CATEGORIES"]
