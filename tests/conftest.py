"""Pytest fixtures for the stock shorts project."""

from __future__ import annotations

import threading
from typing import Iterator

import pytest

from stock_shorts.config import get_settings
from stock_shorts.store import ArticleStore
from stock_shorts.translation import Translator


def make_row(
    article_id: str,
    title: str,
    content: str = "",
    category: str = "nifty",
    *,
    stock_symbol: str = "",
    stock_price: str = "",
    price_change: str = "",
    exchange: str = "NSE",
    time_ago: str = "5 min ago",
    premium: str = "false",
    source: str = "",
    price_target: str = "",
    sentiment: str = "",
) -> list[str]:
    return [
        article_id,
        title,
        content,
        category,
        stock_symbol,
        stock_price,
        price_change,
        exchange,
        "",
        time_ago,
        premium,
        source,
        price_target,
        sentiment,
    ]


class FakeSource:
    def __init__(self, rows=None, error: Exception | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.calls = 0

    def fetch_rows(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [list(row) for row in self.rows]


class BlockingSource(FakeSource):
    """Row source whose fetch waits until ``release`` is set."""

    def __init__(self, rows=None) -> None:
        super().__init__(rows)
        self.blocking = False
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch_rows(self):
        if self.blocking:
            self.started.set()
            self.release.wait(timeout=10)
        return super().fetch_rows()


@pytest.fixture(autouse=True)
def configure_environment(tmp_path, monkeypatch) -> Iterator[None]:
    sqlite_path = tmp_path / "test.db"
    env_vars = {
        "SQLITE_PATH": str(sqlite_path),
        "SEED_SAMPLE_ARTICLES": "false",
        "SYNC_INTERVAL_MINUTES": "2",
        "SYNC_STALE_WAIT_SECONDS": "5",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    for key in ("GOOGLE_SHEETS_SPREADSHEET_ID", "GOOGLE_SHEETS_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def translator() -> Translator:
    return Translator(base_url="https://llm.example.com/v1", api_key=None, model="test-model")


@pytest.fixture
def store(source, translator) -> Iterator[ArticleStore]:
    article_store = ArticleStore(get_settings(), source=source, translator=translator)
    article_store.database.init_db()
    yield article_store
    article_store.shutdown()
