from __future__ import annotations

import random
from datetime import timedelta

import pytest

from conftest import FakeSource, make_row
from stock_shorts.config import get_settings
from stock_shorts.errors import InvalidInput, NotFound, SourceUnavailable
from stock_shorts.filters import is_boilerplate
from stock_shorts.models import utcnow
from stock_shorts.repository import get_sync_state
from stock_shorts.samples import SAMPLE_ROWS, TEST_ARTICLES
from stock_shorts.store import ArticleStore


class RecordingTranslator:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    def try_translate(self, text, target_language="hi"):
        self.calls.append((text, target_language))
        if self.fail:
            return None
        return f"[{target_language}] {text}"


@pytest.fixture
def offline_store():
    article_store = ArticleStore(get_settings(), translator=RecordingTranslator())
    article_store.database.init_db()
    yield article_store
    article_store.shutdown()


def test_create_article_assigns_ids_and_derives_fields(offline_store):
    first = offline_store.create_article({"title": "Nifty closes higher", "content": "Body", "category": "Nifty"})
    second = offline_store.create_article({"title": "Breakout in pharma", "content": "Body two", "category": "breakout"})

    assert first.id == 1
    assert second.id == 2
    assert first.category == "nifty"
    assert first.is_premium is False
    assert second.is_premium is True
    assert first.image_url.startswith("https://")
    assert first.view_count == 0


def test_create_article_continues_after_synced_ids(store, source):
    source.rows = [make_row("40", "Synced", "Body")]
    store.sync()
    article = store.create_article({"title": "Manual entry", "content": "Manual body"})
    assert article.id == 41


def test_create_article_premium_override(offline_store):
    article = offline_store.create_article({"title": "Warrant idea", "content": "Body", "category": "warrant", "isPremium": False})
    assert article.is_premium is False
    article = offline_store.create_article({"title": "Index idea", "content": "Body", "category": "nifty", "isPremium": True})
    assert article.is_premium is True


def test_create_article_fills_boilerplate_content(offline_store):
    article = offline_store.create_article(
        {"title": "IPO opens", "content": "Technical analysts highlight key levels.", "category": "ipo"}
    )
    assert article.content.strip()
    assert not is_boilerplate(article.content)


@pytest.mark.parametrize("payload", [{"title": ""}, {"title": "   "}, {}, ["not", "a", "mapping"]])
def test_create_article_rejects_invalid_input(offline_store, payload):
    with pytest.raises(InvalidInput) as excinfo:
        offline_store.create_article(payload)
    assert excinfo.value.fields
    assert offline_store.count() == 0


def test_add_test_article_uses_templates(offline_store):
    offline_store._rng = random.Random(7)
    article = offline_store.add_test_article()
    assert article.title in {entry["title"] for entry in TEST_ARTICLES}


def test_increment_view_count(offline_store):
    article = offline_store.create_article({"title": "Views", "content": "Body"})
    for _ in range(3):
        offline_store.increment_view_count(article.id)
    offline_store.increment_view_count(999)
    assert offline_store.get_article(article.id).view_count == 3


def test_trending_returns_most_viewed_first(offline_store):
    view_counts = [7, 0, 13, 2, 19, 5, 11, 1, 16, 4, 9, 18, 3, 14, 6, 17, 8, 12, 10, 15]
    for index, views in enumerate(view_counts):
        article = offline_store.create_article({"title": f"Story {index}", "content": f"Body {index}"})
        for _ in range(views):
            offline_store.increment_view_count(article.id)

    ranked = offline_store.get_articles("trending")

    assert [article.view_count for article in ranked[:15]] == sorted(view_counts, reverse=True)[:15]


def test_get_articles_filters_by_category(offline_store):
    offline_store.create_article({"title": "A", "content": "a", "category": "ipo"})
    offline_store.create_article({"title": "B", "content": "b", "category": "nifty"})
    offline_store.create_article({"title": "C", "content": "c", "category": "ipo"})

    assert {article.title for article in offline_store.get_articles("ipo")} == {"A", "C"}
    assert [article.category for article in offline_store.get_articles("all")] == ["nifty", "ipo", "ipo"]
    assert offline_store.get_articles("sme_ipo") == []


def test_require_article_raises_not_found(offline_store):
    assert offline_store.get_article(5) is None
    with pytest.raises(NotFound):
        offline_store.require_article(5)


def test_bookmarks_are_unique_per_user_and_article(offline_store):
    article = offline_store.create_article({"title": "Bookmark me", "content": "Body"})

    first = offline_store.add_bookmark({"userId": 1, "articleId": article.id})
    again = offline_store.add_bookmark({"userId": 1, "articleId": article.id})
    offline_store.add_bookmark({"userId": 2, "articleId": article.id})

    assert first.id == again.id
    assert len(offline_store.get_bookmarks(1)) == 1
    assert offline_store.is_bookmarked(1, article.id)
    assert offline_store.remove_bookmark(1, article.id) is True
    assert offline_store.remove_bookmark(1, article.id) is False
    assert not offline_store.is_bookmarked(1, article.id)
    assert offline_store.is_bookmarked(2, article.id)


def test_read_later_list(offline_store):
    article = offline_store.create_article({"title": "Later", "content": "Body"})
    offline_store.add_to_read_later({"user_id": 3, "article_id": article.id})

    assert offline_store.is_in_read_later(3, article.id)
    assert [entry.article_id for entry in offline_store.get_read_later(3)] == [article.id]
    assert not offline_store.is_bookmarked(3, article.id)
    assert offline_store.remove_from_read_later(3, article.id) is True
    assert offline_store.get_read_later(3) == []


def test_pairing_requires_existing_article(offline_store):
    with pytest.raises(NotFound):
        offline_store.add_bookmark({"userId": 1, "articleId": 77})
    with pytest.raises(InvalidInput):
        offline_store.add_to_read_later({"userId": 0, "articleId": 1})


def test_record_article_view(offline_store):
    article = offline_store.create_article({"title": "Viewed", "content": "Body"})
    view = offline_store.record_article_view({"articleId": article.id, "sessionId": "abc", "timeSpent": 12})
    assert view.id is not None
    assert view.time_spent == 12
    with pytest.raises(InvalidInput):
        offline_store.record_article_view({"articleId": article.id, "sessionId": "", "timeSpent": -1})


def test_translate_article_caches_hindi(offline_store):
    article = offline_store.create_article({"title": "Markets rally", "content": "Sensex gains"})

    title, content = offline_store.translate_article(article.id)
    again = offline_store.translate_article(article.id)

    assert (title, content) == ("[hi] Markets rally", "[hi] Sensex gains")
    assert again == (title, content)
    assert len(offline_store.translator.calls) == 2
    assert offline_store.get_article(article.id).title_hi == title


def test_translate_article_failure_returns_original(offline_store):
    offline_store.translator = RecordingTranslator(fail=True)
    article = offline_store.create_article({"title": "Markets rally", "content": "Sensex gains"})

    assert offline_store.translate_article(article.id) == ("Markets rally", "Sensex gains")
    assert offline_store.get_article(article.id).title_hi is None


def test_translate_unknown_article(offline_store):
    with pytest.raises(NotFound):
        offline_store.translate_article(404)


def test_sync_without_source_raises(offline_store):
    assert offline_store.source is None
    with pytest.raises(SourceUnavailable):
        offline_store.sync()
    assert offline_store.is_stale() is False


def test_staleness_follows_sync_interval(store, source):
    assert store.is_stale() is True
    source.rows = [make_row("1", "Fresh", "Body")]
    store.sync()
    assert store.is_stale() is False

    store._last_attempt = None
    with store.database.session_scope() as session:
        get_sync_state(session).last_synced_at = utcnow() - timedelta(minutes=3)
    assert store.is_stale() is True


def test_stale_read_triggers_sync(store, source):
    source.rows = [make_row("1", "Fresh", "Body")]
    articles = store.get_articles()
    assert source.calls == 1
    assert [article.id for article in articles] == [1]

    store.get_articles()
    assert source.calls == 1


def test_reset_clears_everything(store, source):
    source.rows = [make_row("1", "One", "Body")]
    store.sync()
    store.increment_view_count(1)
    store.add_bookmark({"userId": 1, "articleId": 1})

    store.reset()

    assert store.count() == 0
    assert store.get_bookmarks(1) == []


def test_init_seeds_sample_articles(monkeypatch):
    monkeypatch.setenv("SEED_SAMPLE_ARTICLES", "true")
    get_settings.cache_clear()
    with ArticleStore(get_settings()) as seeded:
        assert seeded.count() == len(SAMPLE_ROWS)
        assert seeded.get_article(5).category == "movers"
        assert seeded.get_article(5).content.strip()
        assert seeded.get_article(2).is_premium is True


def test_init_syncs_from_source():
    source = FakeSource([make_row("8", "From sheet", "Body")])
    with ArticleStore(get_settings(), source=source) as synced:
        assert source.calls == 1
        assert synced.get_article(8).title == "From sheet"


def test_stores_are_isolated(tmp_path, monkeypatch):
    first = ArticleStore(get_settings())
    first.database.init_db()
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "other.db"))
    get_settings.cache_clear()
    second = ArticleStore(get_settings())
    second.database.init_db()

    first.create_article({"title": "Only here", "content": "Body"})

    assert first.count() == 1
    assert second.count() == 0
    first.shutdown()
    second.shutdown()
