"""ORM models for stored entities."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Article(Base):
    __tablename__ = "articles"
    __table_args__ = (
        Index("ix_articles_category_created_at", "category", "created_at"),
        Index("ix_articles_view_count", "view_count"),
    )

    # Ids come from the spreadsheet, so no autoincrement.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(Text(), nullable=False)
    content: Mapped[str] = mapped_column(Text(), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    stock_symbol: Mapped[str | None] = mapped_column(String(64), nullable=True)
    stock_price: Mapped[str | None] = mapped_column(String(64), nullable=True)
    price_change: Mapped[str | None] = mapped_column(String(64), nullable=True)
    exchange: Mapped[str | None] = mapped_column(String(16), nullable=True)
    price_target: Mapped[str | None] = mapped_column(String(64), nullable=True)
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    time_ago: Mapped[str] = mapped_column(String(64), nullable=False, default="Just now")
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=utcnow, nullable=False
    )
    source: Mapped[str | None] = mapped_column(String(256), nullable=True)
    sentiment: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Lazily filled translation cache.
    title_hi: Mapped[str | None] = mapped_column(Text(), nullable=True)
    content_hi: Mapped[str | None] = mapped_column(Text(), nullable=True)


class _UserArticleMixin:
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    article_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=utcnow, nullable=False
    )


class Bookmark(_UserArticleMixin, Base):
    __tablename__ = "bookmarks"
    __table_args__ = (Index("ix_bookmarks_user_article", "user_id", "article_id"),)


class ReadLaterEntry(_UserArticleMixin, Base):
    __tablename__ = "read_later"
    __table_args__ = (Index("ix_read_later_user_article", "user_id", "article_id"),)


class ArticleView(Base):
    __tablename__ = "article_views"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    session_id: Mapped[str] = mapped_column(String(100), nullable=False)
    time_spent: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=utcnow, nullable=False
    )


class SyncState(Base):
    __tablename__ = "sync_state"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False, default=1)
    next_article_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)


__all__ = ["Article", "Bookmark", "ReadLaterEntry", "ArticleView", "SyncState", "utcnow"]
