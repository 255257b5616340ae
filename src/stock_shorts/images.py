"""Deterministic stock photo assignment for articles."""

from __future__ import annotations

from .categories import Category
from .filters import combined_text, match_keywords


FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193

_PEXELS = "https://images.pexels.com/photos/{0}/pexels-photo-{0}.jpeg?auto=compress&cs=tinysrgb&w=600&h=400"


def _pool(*photo_ids: int) -> tuple[str, ...]:
    return tuple(_PEXELS.format(photo_id) for photo_id in photo_ids)


IMAGE_POOLS: dict[str, tuple[str, ...]] = {
    "market": _pool(6801648, 3184358, 590041, 6802042, 4386464),
    "banking": _pool(259200, 4386476, 259027, 6289065, 4386433),
    "technology": _pool(3861969, 3184306, 3184633, 4164418, 4348401),
    "automotive": _pool(3802510, 170811, 1007410, 1149137, 2079246),
    "energy": _pool(2800832, 356036, 433308, 2800830, 415974),
    "healthcare": _pool(3683074, 4033148, 3825368, 4167541, 4386466),
    "retail": _pool(264636, 230544, 1005638, 811101, 2292953),
    "fintech": _pool(919734, 3184360, 4386467, 6289025, 4164418),
    "trading": _pool(590041, 7567438, 590016, 6802042, 3184320),
}

# Checked in order; the first pool with a keyword hit wins.
KEYWORD_POOLS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("banking", ("bank", "hdfc", "sbi", "icici", "kotak", "axis")),
    ("technology", ("tcs", "infosys", "wipro", "tech", "software", "digital")),
    ("automotive", ("maruti", "tata motors", "mahindra", "bajaj auto", "automobile", "vehicle")),
    ("energy", ("ntpc", "ongc", "coal", "power", "energy", "oil", "gas")),
    ("healthcare", ("pharma", "drug", "medicine", "health", "cipla", "sun pharma")),
    ("retail", ("dmart", "retail", "consumer", "fmcg", "goods", "store")),
    ("fintech", ("paytm", "payment", "fintech", "wallet", "upi")),
)

CATEGORY_POOLS: dict[Category, str] = {
    Category.BREAKOUT: "trading",
    Category.WARRANT: "trading",
    Category.MOVERS: "trading",
    Category.IPO: "market",
    Category.SME_IPO: "market",
    Category.RESULTS: "market",
    Category.RESEARCH_REPORT: "market",
    Category.NIFTY: "market",
}
DEFAULT_POOL = "market"


def fnv1a_32(text: str) -> int:
    value = FNV32_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * FNV32_PRIME) & 0xFFFFFFFF
    return value


def select_pool(title: str | None, content: str | None, category: Category | str | None) -> str:
    text = combined_text(title, content)
    for pool_name, keywords in KEYWORD_POOLS:
        if match_keywords(text, keywords):
            return pool_name
    try:
        return CATEGORY_POOLS.get(Category(category), DEFAULT_POOL)
    except ValueError:
        return DEFAULT_POOL


def select_image(
    *,
    title: str | None,
    content: str | None,
    category: Category | str | None,
    stock_symbol: str | None = None,
    article_id: int = 1,
) -> str:
    """Pick a photo for an article.

    Identical inputs always give the same URL; distinct articles spread over
    the chosen pool via ``(hash + id) mod len(pool)``.
    """
    pool = IMAGE_POOLS[select_pool(title, content, category)]
    seed = ((title or "") + (content or "") + (stock_symbol or "")).lower()
    index = abs(fnv1a_32(seed) + article_id) % len(pool)
    return pool[index]


__all__ = ["IMAGE_POOLS", "KEYWORD_POOLS", "fnv1a_32", "select_pool", "select_image"]
