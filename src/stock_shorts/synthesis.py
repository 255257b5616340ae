"""Deterministic filler bodies for rows whose content is missing or repeated."""

from __future__ import annotations

from .categories import Category
from .filters import is_blank, is_boilerplate, strip_boilerplate


_BODY_TEMPLATES: dict[Category | None, tuple[str, ...]] = {
    Category.NIFTY: (
        "{title} reflects the current market sentiment with significant trading activity. "
        "The index movement indicates strong investor confidence amid favorable market conditions.",
        "Market analysts are closely watching {title} as it shapes broader market trends. "
        "Index heavyweights are setting the tone for the {category} segment.",
        "{title} represents a key development in the equity markets. "
        "Institutional investors are showing increased interest in index constituents.",
    ),
    Category.BREAKOUT: (
        "{title} represents a significant breakout pattern on the charts. "
        "Price action points to potential for continued upward momentum.",
        "Breakout alert: {title} has crossed key resistance levels. "
        "Volume analysis supports the sustainability of this move.",
        "{title} shows strong breakout characteristics with robust trading volumes. "
        "This could signal the beginning of a new trend.",
    ),
    Category.RESEARCH_REPORT: (
        "Latest research report highlights: {title}. "
        "Detailed fundamental analysis reveals key investment insights and recommendations.",
        "{title} - comprehensive research coverage of financial metrics, growth prospects "
        "and market positioning.",
        "Research update: {title} provides in-depth sector analysis and stock-specific "
        "recommendations for informed investment decisions.",
    ),
    Category.IPO: (
        "{title} puts the primary market in focus. "
        "Subscription trends and grey market activity are being tracked closely by investors.",
        "IPO watch: {title}. Anchor demand and pricing will set the tone for the listing day.",
        "{title} adds to a busy pipeline of public issues as companies tap buoyant markets.",
    ),
    Category.RESULTS: (
        "{title} as the earnings season gathers pace. "
        "Margins and guidance remain the key numbers for the street.",
        "Earnings update: {title}. Investors are weighing the numbers against consensus estimates.",
        "{title} offers a fresh read on corporate profitability for the quarter.",
    ),
    None: (
        "{title} represents an important development in the financial markets. "
        "Market dynamics and investor sentiment continue to evolve.",
        "{title} captures current market attention with significant implications "
        "for sector performance and trading strategies.",
        "Latest update: {title} reflects ongoing market trends and provides insights "
        "into current investment opportunities.",
    ),
}

_MARKET_INSIGHTS = (
    "Trading volumes remain robust with sustained institutional interest.",
    "Market volatility presents both opportunities and challenges for investors.",
    "Sectoral rotation continues as investors seek value across different segments.",
    "Risk-on sentiment prevails amid favorable macroeconomic conditions.",
    "Momentum indicators point to potential for further moves in this direction.",
)

_CLOSING_SENTENCE = "Market participants continue to monitor these developments for strategic positioning."


def needs_synthesis(content: str | None, *, duplicate: bool = False) -> bool:
    return duplicate or is_blank(content) or is_boilerplate(content)


def synthesize_content(
    title: str,
    category: Category | str,
    stock_symbol: str | None = None,
    stock_price: str | None = None,
    price_change: str | None = None,
    position_index: int = 0,
) -> str:
    """Build a body for an article from its metadata.

    The output depends only on the arguments, so re-running a sync over
    unchanged rows yields identical content.
    """
    try:
        resolved = Category(category)
    except ValueError:
        resolved = None
    templates = _BODY_TEMPLATES.get(resolved, _BODY_TEMPLATES[None])
    headline = strip_boilerplate(title).strip() or "This update"
    label = resolved.value.replace("_", " ") if resolved else "market"
    index = abs(position_index)

    body = templates[index % len(templates)].format(title=headline, category=label)
    insight = _MARKET_INSIGHTS[index % len(_MARKET_INSIGHTS)]

    stock_details = ""
    if stock_symbol and stock_price:
        stock_details = f" {stock_symbol} is currently trading at {stock_price}"
        if price_change:
            stock_details += f" with a movement of {price_change}"
        stock_details += " in the current trading session."

    return strip_boilerplate(f"{body} {insight}{stock_details} {_CLOSING_SENTENCE}")


def variant_count() -> int:
    """Number of distinct template/insight combinations per category."""
    longest = max(len(templates) for templates in _BODY_TEMPLATES.values())
    return longest * len(_MARKET_INSIGHTS)


__all__ = ["needs_synthesis", "synthesize_content", "variant_count"]
