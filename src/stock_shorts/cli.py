"""Command line interface for the stock shorts feed."""

from __future__ import annotations

import argparse
import logging
import time

from .errors import SourceUnavailable
from .scheduler import start_scheduler, stop_scheduler
from .store import ArticleStore


def _configure_logging(level: str | None) -> None:
    if level is None:
        return
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=numeric_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Stock news shorts utilities")
    parser.add_argument("--log-level", default="INFO", help="Log level, e.g. INFO or DEBUG")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Run one sync from the spreadsheet")

    trending_parser = subparsers.add_parser("trending", help="Print the trending feed")
    trending_parser.add_argument("--limit", type=int, default=20, help="Number of articles to print")

    subparsers.add_parser("add-test-article", help="Insert one demo article")
    subparsers.add_parser("reset", help="Remove all stored articles and user lists")
    subparsers.add_parser("scheduler", help="Start the recurring sync scheduler")

    serve_parser = subparsers.add_parser("serve", help="Run the JSON API with the scheduler")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host for the development server")
    serve_parser.add_argument("--port", type=int, default=5000, help="Port for the server")

    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    if args.command == "serve":
        from .web import create_app

        app = create_app(enable_scheduler=True)
        app.run(host=args.host, port=args.port, debug=False)
        return 0

    store = ArticleStore()
    store.database.init_db()
    try:
        if args.command == "sync":
            try:
                result = store.force_sync()
            except SourceUnavailable as exc:
                print(f"Sync failed: {exc}")
                return 1
            print(
                "Fetched: {fetched}, Added: {added}, Updated: {updated}, "
                "Removed: {removed}, Skipped: {skipped}, Total: {total}".format(**result.as_dict())
            )
            return 0

        if args.command == "trending":
            for article in store.get_trending_articles()[: args.limit]:
                print(f"{article.view_count:>6}  [{article.category}] {article.title}")
            return 0

        if args.command == "add-test-article":
            article = store.add_test_article()
            print(f"Created article {article.id}: {article.title}")
            return 0

        if args.command == "reset":
            removed = store.reset()
            print(f"Removed {removed} rows")
            return 0

        if args.command == "scheduler":
            store.init()
            start_scheduler(store)
            print("Scheduler started. Press Ctrl+C to stop.")
            try:
                while True:
                    time.sleep(60)
            except KeyboardInterrupt:
                print("Stopping scheduler...")
                stop_scheduler(store)
            return 0
    finally:
        store.shutdown()

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
