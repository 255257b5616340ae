"""Mapping of free-text category labels onto the fixed feed categories."""

from __future__ import annotations

import logging
from enum import Enum


logger = logging.getLogger(__name__)


class Category(str, Enum):
    NIFTY = "nifty"
    BREAKOUT = "breakout"
    MOVERS = "movers"
    WARRANT = "warrant"
    IPO = "ipo"
    SME_IPO = "sme_ipo"
    ORDER_WINS = "order_wins"
    ATH = "ath"
    RESULTS = "results"
    RESEARCH_REPORT = "research_report"
    OTHERS = "others"
    GLOBAL = "global"
    # Query-time view only; never stored on an article.
    TRENDING = "trending"

    def __str__(self) -> str:
        return self.value


STORED_CATEGORIES = frozenset(category for category in Category if category is not Category.TRENDING)
PREMIUM_CATEGORIES = frozenset({Category.WARRANT, Category.BREAKOUT})

# Order matters for the substring pass: the first alias that matches wins.
CATEGORY_ALIASES: dict[str, Category] = {
    # Global markets
    "global": Category.GLOBAL,
    "world": Category.GLOBAL,
    "international": Category.GLOBAL,
    "us market": Category.GLOBAL,
    "dow": Category.GLOBAL,
    "nasdaq": Category.GLOBAL,
    "s&p": Category.GLOBAL,
    "asian markets": Category.GLOBAL,
    # Indices
    "nifty": Category.NIFTY,
    "market": Category.NIFTY,
    "markets": Category.NIFTY,
    "index": Category.NIFTY,
    "indices": Category.NIFTY,
    "sensex": Category.NIFTY,
    "banknifty": Category.NIFTY,
    "bank nifty": Category.NIFTY,
    # Warrants
    "warrant": Category.WARRANT,
    "warrants": Category.WARRANT,
    "call warrant": Category.WARRANT,
    "put warrant": Category.WARRANT,
    # Breakouts
    "breakout": Category.BREAKOUT,
    "breakouts": Category.BREAKOUT,
    "technical": Category.BREAKOUT,
    "chart": Category.BREAKOUT,
    # Research reports
    "research report": Category.RESEARCH_REPORT,
    "research_report": Category.RESEARCH_REPORT,
    "researchreport": Category.RESEARCH_REPORT,
    "research": Category.RESEARCH_REPORT,
    "report": Category.RESEARCH_REPORT,
    "analysis": Category.RESEARCH_REPORT,
    "analyst": Category.RESEARCH_REPORT,
    "brokerage": Category.RESEARCH_REPORT,
    # Movers
    "movers": Category.MOVERS,
    "mover": Category.MOVERS,
    "most active": Category.MOVERS,
    "mostactive": Category.MOVERS,
    "gainers": Category.MOVERS,
    "losers": Category.MOVERS,
    "top gainers": Category.MOVERS,
    "top losers": Category.MOVERS,
    # Order wins
    "orderwins": Category.ORDER_WINS,
    "order wins": Category.ORDER_WINS,
    "order_wins": Category.ORDER_WINS,
    "orderwin": Category.ORDER_WINS,
    "order win": Category.ORDER_WINS,
    "wins": Category.ORDER_WINS,
    "deal": Category.ORDER_WINS,
    "contract": Category.ORDER_WINS,
    # All-time highs
    "ath": Category.ATH,
    "all time high": Category.ATH,
    "all-time high": Category.ATH,
    "record high": Category.ATH,
    "new high": Category.ATH,
    "52 week high": Category.ATH,
    # Results
    "results": Category.RESULTS,
    "result": Category.RESULTS,
    "earnings": Category.RESULTS,
    "quarterly": Category.RESULTS,
    "q1": Category.RESULTS,
    "q2": Category.RESULTS,
    "q3": Category.RESULTS,
    "q4": Category.RESULTS,
    # SME IPOs, checked before plain IPOs so "sme ipo" is not swallowed
    "sme ipo": Category.SME_IPO,
    "sme_ipo": Category.SME_IPO,
    "smeipo": Category.SME_IPO,
    "sme": Category.SME_IPO,
    "small medium enterprises": Category.SME_IPO,
    # IPOs
    "ipo": Category.IPO,
    "ipos": Category.IPO,
    "initial public offering": Category.IPO,
    "public offering": Category.IPO,
    "listing": Category.IPO,
    # Commodities are kept out of the index bucket
    "mcx": Category.OTHERS,
    "commodity": Category.OTHERS,
    "commodities": Category.OTHERS,
    "gold": Category.OTHERS,
    "silver": Category.OTHERS,
    "crude": Category.OTHERS,
    "oil": Category.OTHERS,
    # General news
    "others": Category.OTHERS,
    "other": Category.OTHERS,
    "general": Category.OTHERS,
    "news": Category.OTHERS,
    "policy": Category.OTHERS,
    "rbi": Category.OTHERS,
    "government": Category.OTHERS,
}


def normalize_category(raw_label: str | None) -> Category:
    """Map an arbitrary label to a stored category.

    Exact alias hits win, then the first alias contained in the label (or
    containing it), then ``others``. Never raises.
    """
    label = " ".join((raw_label or "").lower().split())
    if label:
        exact = CATEGORY_ALIASES.get(label)
        if exact is not None:
            return exact
        for alias, category in CATEGORY_ALIASES.items():
            if alias in label or label in alias:
                return category
    logger.info("Unknown category %r mapped to %s", raw_label, Category.OTHERS.value)
    return Category.OTHERS


def is_premium_category(category: Category | str) -> bool:
    try:
        return Category(category) in PREMIUM_CATEGORIES
    except ValueError:
        return False


__all__ = [
    "Category",
    "CATEGORY_ALIASES",
    "PREMIUM_CATEGORIES",
    "STORED_CATEGORIES",
    "normalize_category",
    "is_premium_category",
]
