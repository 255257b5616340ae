"""Conversion of raw spreadsheet rows into article drafts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .categories import Category, is_premium_category, normalize_category
from .errors import MalformedRow
from .filters import is_blank
from .images import select_image
from .synthesis import needs_synthesis, synthesize_content, variant_count


logger = logging.getLogger(__name__)

RawRow = Sequence[str]

# Positional layout of a spreadsheet row; column 8 is unused.
ROW_COLUMNS = (
    "id",
    "title",
    "content",
    "category",
    "stock_symbol",
    "stock_price",
    "price_change",
    "exchange",
    None,
    "time_ago",
    "is_premium",
    "source",
    "price_target",
    "sentiment",
)

DEFAULT_TITLE = "Untitled"
DEFAULT_TIME_AGO = "Just now"
_TRUE_FLAGS = frozenset({"true", "yes", "y", "1"})


@dataclass(slots=True)
class ParsedRow:
    position: int
    cells: dict[str, str]
    missing: tuple[str, ...] = ()

    def get(self, name: str) -> str:
        return self.cells.get(name, "")

    def optional(self, name: str) -> str | None:
        value = self.get(name)
        return value or None


@dataclass(slots=True)
class ArticleDraft:
    id: int
    title: str
    content: str
    category: Category
    image_url: str
    is_premium: bool
    time_ago: str = DEFAULT_TIME_AGO
    stock_symbol: str | None = None
    stock_price: str | None = None
    price_change: str | None = None
    exchange: str | None = None
    source: str | None = None
    price_target: str | None = None
    sentiment: str | None = None
    synthesized: bool = False
    missing_fields: tuple[str, ...] = field(default=(), repr=False)


def parse_row(raw_row: RawRow, position: int) -> ParsedRow:
    cells: dict[str, str] = {}
    missing: list[str] = []
    for index, name in enumerate(ROW_COLUMNS):
        if name is None:
            continue
        if index >= len(raw_row) or raw_row[index] is None:
            missing.append(name)
            cells[name] = ""
            continue
        cells[name] = str(raw_row[index]).strip()
    if not cells["id"] and not cells["title"]:
        raise MalformedRow(position, "missing both id and title")
    return ParsedRow(position=position, cells=cells, missing=tuple(missing))


def explicit_id(parsed: ParsedRow) -> int | None:
    """The id the sheet assigned to this row, if it is a positive integer."""
    try:
        value = int(parsed.get("id"))
    except ValueError:
        return None
    return value if value > 0 else None


def resolve_id(parsed: ParsedRow) -> int:
    value = explicit_id(parsed)
    return parsed.position + 1 if value is None else value


def parse_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUE_FLAGS


def _synthesize_unique(
    parsed: ParsedRow,
    title: str,
    category: Category,
    article_id: int,
    is_taken: Callable[[str], bool],
) -> str:
    symbol = parsed.optional("stock_symbol")
    price = parsed.optional("stock_price")
    change = parsed.optional("price_change")
    for offset in range(variant_count()):
        candidate = synthesize_content(
            title, category, symbol, price, change, position_index=parsed.position + offset
        )
        if not is_taken(candidate):
            return candidate
    candidate = synthesize_content(title, category, symbol, price, change, parsed.position)
    return f"{candidate} (ref {article_id})"


def map_row(
    row: RawRow | ParsedRow,
    position_index: int,
    *,
    duplicate: bool = False,
    is_taken: Callable[[str], bool] | None = None,
    article_id: int | None = None,
) -> ArticleDraft:
    """Turn one row into an :class:`ArticleDraft`.

    ``duplicate`` is supplied by the caller, which alone knows the content of
    earlier rows in the batch. ``is_taken`` lets the caller veto synthesized
    bodies that already exist in the batch. ``article_id`` overrides the id
    taken from the row.
    """
    parsed = row if isinstance(row, ParsedRow) else parse_row(row, position_index)
    if parsed.missing:
        logger.debug("Row %s missing cells: %s", position_index, ", ".join(parsed.missing))

    if article_id is None:
        article_id = resolve_id(parsed)
    title = parsed.get("title") or DEFAULT_TITLE
    category = normalize_category(parsed.get("category"))

    content = parsed.get("content")
    synthesized = needs_synthesis(content, duplicate=duplicate)
    if synthesized:
        content = _synthesize_unique(
            parsed, title, category, article_id, is_taken or (lambda _text: False)
        )

    explicit_premium = parse_flag(parsed.get("is_premium"))
    stock_symbol = parsed.optional("stock_symbol")
    image_url = select_image(
        title=title,
        content=content,
        category=category,
        stock_symbol=stock_symbol,
        article_id=article_id,
    )
    return ArticleDraft(
        id=article_id,
        title=title,
        content=content,
        category=category,
        image_url=image_url,
        is_premium=explicit_premium or is_premium_category(category),
        time_ago=parsed.get("time_ago") or DEFAULT_TIME_AGO,
        stock_symbol=stock_symbol,
        stock_price=parsed.optional("stock_price"),
        price_change=parsed.optional("price_change"),
        exchange=parsed.optional("exchange"),
        source=parsed.optional("source"),
        price_target=parsed.optional("price_target"),
        sentiment=parsed.optional("sentiment"),
        synthesized=synthesized,
        missing_fields=parsed.missing,
    )


def is_duplicate_content(content: str | None, seen: Callable[[str], bool]) -> bool:
    if is_blank(content):
        return False
    return seen(content.strip())


__all__ = [
    "RawRow",
    "ParsedRow",
    "ArticleDraft",
    "ROW_COLUMNS",
    "parse_row",
    "explicit_id",
    "resolve_id",
    "parse_flag",
    "map_row",
    "is_duplicate_content",
]
