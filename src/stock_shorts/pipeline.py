"""Core pipeline to fetch, map, deduplicate and store spreadsheet articles."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Sequence

from .db import Database
from .errors import MalformedRow
from .mapping import (
    ArticleDraft,
    ParsedRow,
    RawRow,
    explicit_id,
    is_duplicate_content,
    map_row,
    parse_row,
)
from .models import utcnow
from .repository import count_articles, replace_articles
from .sheets_client import RowSource


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncResult:
    fetched: int = 0
    added: int = 0
    updated: int = 0
    removed: int = 0
    skipped: int = 0
    total: int = 0
    applied: bool = False

    def as_dict(self) -> dict[str, int | bool]:
        return asdict(self)


def build_batch(rows: Sequence[RawRow]) -> tuple[list[ArticleDraft], int]:
    """Map rows in order, regenerating repeated bodies.

    Ids the sheet supplies are reserved first; rows without a usable id get
    the lowest free number from their position upward. Returns the drafts and
    the number of rows skipped as malformed or as repeated ids.
    """
    parsed_rows: list[ParsedRow] = []
    skipped = 0
    for position, raw_row in enumerate(rows):
        try:
            parsed_rows.append(parse_row(raw_row, position))
        except MalformedRow as exc:
            logger.warning("Skipping malformed row: %s", exc)
            skipped += 1

    reserved = {value for value in map(explicit_id, parsed_rows) if value is not None}
    drafts: list[ArticleDraft] = []
    seen_ids: set[int] = set()
    seen_contents: set[str] = set()

    for parsed in parsed_rows:
        article_id = explicit_id(parsed)
        if article_id is None:
            article_id = parsed.position + 1
            while article_id in reserved:
                article_id += 1
            reserved.add(article_id)
        elif article_id in seen_ids:
            logger.warning(
                "Skipping row %s: article id %s already used earlier in this batch",
                parsed.position,
                article_id,
            )
            skipped += 1
            continue

        duplicate = is_duplicate_content(parsed.get("content"), seen_contents.__contains__)
        draft = map_row(
            parsed,
            parsed.position,
            duplicate=duplicate,
            is_taken=seen_contents.__contains__,
            article_id=article_id,
        )
        if duplicate:
            logger.debug("Row %s repeats earlier content; regenerated body", parsed.position)

        seen_ids.add(draft.id)
        seen_contents.add(draft.content)
        drafts.append(draft)

    return drafts, skipped


def run_sync(database: Database, source: RowSource, *, now: datetime | None = None) -> SyncResult:
    """Run one full ingestion pass.

    Fetching and mapping finish before the store is touched, and the
    replacement runs in a single transaction, so a failure at any point leaves
    the previous article set in place. Errors propagate to the caller.
    """
    logger.info("Starting article sync")
    rows = source.fetch_rows()
    result = SyncResult(fetched=len(rows))
    if not rows:
        logger.info("Source returned no rows; keeping current articles")
        with database.session_scope() as session:
            result.total = count_articles(session)
        return result

    drafts, skipped = build_batch(rows)
    result.skipped = skipped
    if not drafts:
        logger.warning("All %s fetched rows were malformed; keeping current articles", len(rows))
        with database.session_scope() as session:
            result.total = count_articles(session)
        return result

    synced_at = now or utcnow()
    with database.session_scope() as session:
        inserted, updated, removed = replace_articles(session, drafts, synced_at=synced_at)

    result.added = inserted
    result.updated = updated
    result.removed = removed
    result.total = len(drafts)
    result.applied = True
    logger.info(
        "Sync complete: fetched=%s added=%s updated=%s removed=%s skipped=%s total=%s",
        result.fetched,
        result.added,
        result.updated,
        result.removed,
        result.skipped,
        result.total,
    )
    return result


__all__ = ["SyncResult", "build_batch", "run_sync"]
