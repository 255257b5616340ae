"""Flask JSON API over the article store."""

from __future__ import annotations

from typing import Any

from flask import Flask, jsonify, request

from .config import Settings, get_settings
from .errors import InvalidInput, NotFound, SourceUnavailable
from .models import Bookmark, ReadLaterEntry
from .scheduler import start_scheduler
from .schemas import ArticleOut, ArticleViewOut, UserArticleOut, dump_json
from .store import ArticleStore


USER_HEADER = "X-User-Id"


def create_app(
    store: ArticleStore | None = None,
    settings: Settings | None = None,
    *,
    enable_scheduler: bool = False,
) -> Flask:
    app = Flask(__name__)
    app.config["SETTINGS"] = settings or (store.settings if store else get_settings())
    if store is None:
        store = ArticleStore(app.config["SETTINGS"]).init()
    app.config["STORE"] = store

    if enable_scheduler:
        start_scheduler(store)

    @app.errorhandler(NotFound)
    def handle_not_found(exc: NotFound):
        return jsonify({"message": str(exc)}), 404

    @app.errorhandler(InvalidInput)
    def handle_invalid(exc: InvalidInput):
        return jsonify({"message": str(exc), "fields": exc.fields}), 400

    @app.errorhandler(SourceUnavailable)
    def handle_source_unavailable(exc: SourceUnavailable):
        return jsonify({"message": f"Failed to sync articles: {exc}"}), 502

    @app.get("/api/articles")
    def list_articles():
        category = request.args.get("category") or None
        articles = store.get_articles(category)
        return jsonify([dump_json(ArticleOut, article) for article in articles])

    @app.get("/api/articles/<int:article_id>")
    def get_article(article_id: int):
        article = store.require_article(article_id)
        return jsonify(dump_json(ArticleOut, article))

    @app.post("/api/articles/<int:article_id>/view")
    def track_view(article_id: int):
        store.increment_view_count(article_id)
        return jsonify({"success": True})

    @app.post("/api/articles/test")
    def add_test_article():
        article = store.add_test_article()
        return jsonify(dump_json(ArticleOut, article)), 201

    @app.post("/api/articles/<int:article_id>/translate")
    def translate_article(article_id: int):
        data = _json_body()
        target = data.get("targetLanguage") or "hi"
        title, content = store.translate_article(article_id, target)
        return jsonify({"id": article_id, "targetLanguage": target, "title": title, "content": content})

    @app.post("/api/sync-sheets")
    def sync_sheets():
        result = store.force_sync()
        return jsonify({"message": "Sync completed", **result.as_dict()})

    @app.post("/api/article-views")
    def record_article_view():
        view = store.record_article_view(_json_body())
        return jsonify(dump_json(ArticleViewOut, view)), 201

    _register_user_list(app, store, "bookmarks", Bookmark)
    _register_user_list(app, store, "read-later", ReadLaterEntry)

    return app


def _register_user_list(app: Flask, store: ArticleStore, name: str, model: type) -> None:
    is_bookmark = model is Bookmark
    add = store.add_bookmark if is_bookmark else store.add_to_read_later
    remove = store.remove_bookmark if is_bookmark else store.remove_from_read_later
    contains = store.is_bookmarked if is_bookmark else store.is_in_read_later
    list_entries = store.get_bookmarks if is_bookmark else store.get_read_later
    flag = "isBookmarked" if is_bookmark else "isInReadLater"

    def list_view():
        entries = list_entries(_user_id())
        return jsonify([dump_json(UserArticleOut, entry) for entry in entries])

    def add_view():
        data = _json_body()
        payload = {"userId": _user_id(), "articleId": data.get("articleId")}
        entry = add(payload)
        return jsonify(dump_json(UserArticleOut, entry)), 201

    def remove_view(article_id: int):
        if not remove(_user_id(), article_id):
            raise NotFound(f"Article {article_id} is not in {name}")
        return "", 204

    def check_view(article_id: int):
        return jsonify({flag: contains(_user_id(), article_id)})

    app.add_url_rule(f"/api/{name}", f"{name}_list", list_view, methods=["GET"])
    app.add_url_rule(f"/api/{name}", f"{name}_add", add_view, methods=["POST"])
    app.add_url_rule(f"/api/{name}/<int:article_id>", f"{name}_remove", remove_view, methods=["DELETE"])
    app.add_url_rule(f"/api/{name}/<int:article_id>/check", f"{name}_check", check_view, methods=["GET"])


def _json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object", ["payload"])
    return data


def _user_id() -> int:
    raw = request.headers.get(USER_HEADER) or request.args.get("userId")
    if not raw:
        raise InvalidInput("Missing user id", ["userId"])
    try:
        value = int(raw)
    except ValueError:
        raise InvalidInput("User id must be an integer", ["userId"]) from None
    if value <= 0:
        raise InvalidInput("User id must be positive", ["userId"])
    return value


__all__ = ["create_app"]
