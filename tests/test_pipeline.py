from __future__ import annotations

from datetime import datetime

import pytest

from conftest import FakeSource, make_row
from stock_shorts.db import Database
from stock_shorts.errors import SourceUnavailable
from stock_shorts.models import Article
from stock_shorts.pipeline import build_batch, run_sync
from stock_shorts.repository import get_sync_state, store_translation


SCENARIO_ROWS = [
    ["1", "Nifty up", "Content A", "nifty", "NIFTY", "23000", "+1%", "NSE", "", "5 min ago", "false", "", "", ""],
    ["2", "Nifty up again", "Content A", "nifty", "NIFTY", "23010", "+1.1%", "NSE", "", "6 min ago", "false", "", "", ""],
]


def _snapshot(store):
    return sorted((article.id, article.content) for article in store.get_articles("all"))


def test_sync_regenerates_repeated_content(store, source):
    source.rows = SCENARIO_ROWS

    result = store.sync()

    assert result.applied is True
    assert result.added == 2
    assert store.count() == 2
    first = store.get_article(1)
    second = store.get_article(2)
    assert first.content == "Content A"
    assert second.content and second.content != "Content A"
    assert first.category == second.category == "nifty"
    assert first.is_premium is False
    assert second.is_premium is False


def test_sync_maps_most_active_to_movers(store, source):
    source.rows = [make_row("5", "Volume toppers", "Busy session", "Most Active")]
    store.sync()
    assert store.get_article(5).category == "movers"


def test_sync_marks_warrant_as_premium(store, source):
    source.rows = [make_row("6", "Warrant watch", "Call warrants active", "warrant", premium="")]
    store.sync()
    assert store.get_article(6).is_premium is True


def test_empty_content_is_filled(store, source):
    source.rows = [
        make_row("1", "Nifty up", "", "nifty"),
        make_row("2", "Bank stocks rally", "   ", "nifty"),
    ]
    store.sync()
    assert all(article.content.strip() for article in store.get_articles("all"))


def test_repeated_content_three_times_is_unique(store, source):
    source.rows = [make_row(str(i), f"Title {i}", "Same body", "ipo") for i in range(1, 4)]
    store.sync()
    contents = [article.content for article in store.get_articles("ipo")]
    assert len(contents) == 3
    assert len(set(contents)) == 3


def test_synthesized_bodies_do_not_collide():
    rows = [make_row(str(i), "Same title", "", "nifty") for i in range(1, 40)]
    drafts, skipped = build_batch(rows)
    assert skipped == 0
    contents = [draft.content for draft in drafts]
    assert len(set(contents)) == len(contents)


def test_view_count_survives_resync(store, source):
    source.rows = [make_row("7", "Breakout stock", "Body", "breakout")]
    store.sync()
    for _ in range(42):
        store.increment_view_count(7)
    created_at = store.get_article(7).created_at

    source.rows = [make_row("7", "Breakout stock (updated)", "New body", "breakout")]
    result = store.sync()

    article = store.get_article(7)
    assert result.updated == 1
    assert article.view_count == 42
    assert article.created_at == created_at
    assert article.title == "Breakout stock (updated)"


def test_resync_removes_missing_ids(store, source):
    source.rows = [make_row("1", "One", "Body one"), make_row("2", "Two", "Body two")]
    store.sync()
    source.rows = [make_row("2", "Two", "Body two")]

    result = store.sync()

    assert result.removed == 1
    assert store.get_article(1) is None
    assert store.count() == 1


def test_failed_fetch_leaves_store_untouched(store, source):
    source.rows = SCENARIO_ROWS
    store.sync()
    before = _snapshot(store)

    source.error = SourceUnavailable("sheet offline")
    with pytest.raises(SourceUnavailable):
        store.sync()

    assert _snapshot(store) == before


def test_background_sync_swallows_failure(store, source):
    source.error = SourceUnavailable("sheet offline")
    assert store.background_sync() is None
    assert store.count() == 0


def test_empty_source_keeps_current_articles(store, source):
    source.rows = SCENARIO_ROWS
    store.sync()
    source.rows = []

    result = store.sync()

    assert result.applied is False
    assert result.total == 2
    assert store.count() == 2


def test_malformed_rows_are_skipped(store, source):
    source.rows = [
        ["", "", "orphan content"],
        make_row("3", "Valid row", "Body"),
    ]
    result = store.sync()
    assert result.skipped == 1
    assert store.count() == 1


def test_only_malformed_rows_is_noop(store, source):
    source.rows = SCENARIO_ROWS
    store.sync()
    source.rows = [["", ""], []]

    result = store.sync()

    assert result.applied is False
    assert store.count() == 2


def test_duplicate_ids_keep_first_row(store, source):
    source.rows = [
        make_row("4", "First", "Body one"),
        make_row("4", "Second", "Body two"),
    ]
    result = store.sync()
    assert result.skipped == 1
    assert store.get_article(4).title == "First"


def test_changed_content_clears_cached_translation(store, source):
    source.rows = [make_row("1", "Nifty up", "Body")]
    store.sync()
    with store.database.session_scope() as session:
        store_translation(session, 1, "title", "content")

    source.rows = [make_row("1", "Nifty up", "Another body")]
    store.sync()

    article = store.get_article(1)
    assert article.title_hi is None
    assert article.content_hi is None


def test_unchanged_article_keeps_cached_translation(store, source):
    source.rows = [make_row("1", "Nifty up", "Body")]
    store.sync()
    with store.database.session_scope() as session:
        store_translation(session, 1, "title", "content")

    result = store.sync()

    assert result.updated == 0
    assert store.get_article(1).title_hi == "title"


def test_run_sync_updates_sync_state(tmp_path):
    database = Database(str(tmp_path / "state.db"))
    database.init_db()
    synced_at = datetime(2024, 1, 5, 9, 30)

    run_sync(database, FakeSource([make_row("3", "A", "a"), make_row("9", "B", "b")]), now=synced_at)

    with database.session_scope() as session:
        state = get_sync_state(session)
        assert state.next_article_id == 10
        assert state.last_synced_at == synced_at
        assert session.get(Article, 9).created_at == synced_at
    database.dispose()


def test_source_failure_propagates_from_run_sync(tmp_path):
    database = Database(str(tmp_path / "state.db"))
    database.init_db()
    with pytest.raises(SourceUnavailable):
        run_sync(database, FakeSource(error=SourceUnavailable("down")))
    database.dispose()


def test_positional_id_never_takes_an_explicit_id(store, source):
    source.rows = [make_row("1", "Real article one", "Body one")]
    store.sync()
    for _ in range(5):
        store.increment_view_count(1)

    source.rows = [
        make_row("n/a", "Other article", "Body other"),
        make_row("1", "Real article one", "Body one"),
    ]
    result = store.sync()

    real = store.get_article(1)
    assert result.skipped == 0
    assert real.title == "Real article one"
    assert real.view_count == 5
    others = [article for article in store.get_articles("all") if article.id != 1]
    assert [(article.title, article.view_count) for article in others] == [("Other article", 0)]


def test_positional_ids_skip_every_explicit_id():
    rows = [
        make_row("", "No id first", "a"),
        make_row("abc", "Bad id", "b"),
        make_row("2", "Explicit two", "c"),
        make_row("3", "Explicit three", "d"),
        make_row("0", "Zero id", "e"),
    ]
    drafts, skipped = build_batch(rows)
    assert skipped == 0
    assert [(draft.title, draft.id) for draft in drafts] == [
        ("No id first", 1),
        ("Bad id", 4),
        ("Explicit two", 2),
        ("Explicit three", 3),
        ("Zero id", 5),
    ]
