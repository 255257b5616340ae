"""Built-in rows used when no spreadsheet is configured, and demo articles."""

from __future__ import annotations

from dataclasses import dataclass, field

from .mapping import RawRow


SAMPLE_ROWS: tuple[tuple[str, ...], ...] = (
    (
        "1",
        "Nifty Hits Record High of 23,500 Points",
        "The Nifty 50 index surged to a new all-time high of 23,500 points, driven by strong "
        "buying in banking and IT stocks. FII inflows of Rs 2,800 crore were recorded on the day.",
        "nifty",
        "NIFTY",
        "23,500",
        "+1.8%",
        "NSE",
        "",
        "5 minutes ago",
        "false",
        "",
        "",
        "bullish",
    ),
    (
        "2",
        "HDFC Bank Call Warrants Show Strong Activity",
        "HDFC Bank call warrants are showing unprecedented activity with volumes up 340%. "
        "The 1850 CE strike shows the highest open interest build-up.",
        "warrant",
        "HDFCBANK",
        "1,845.30",
        "+2.8%",
        "NSE",
        "",
        "1 hour ago",
        "",
        "",
        "",
        "bullish",
    ),
    (
        "3",
        "Small-Cap Pharma Stock Breaks Out of 18-Month Range",
        "A small-cap pharmaceutical stock broke out of an 18-month consolidation range with "
        "volume 280% above its 20-day average.",
        "breakout",
        "SMALLPHARMA",
        "188.45",
        "+7.2%",
        "NSE",
        "",
        "30 minutes ago",
        "",
        "",
        "",
        "bullish",
    ),
    (
        "4",
        "Tech Mahindra Beats Q3 Estimates, Shares Jump 8%",
        "Tech Mahindra reported revenue growth of 12% YoY, beating analyst estimates, while "
        "its digital transformation business grew 25% in the quarter.",
        "results",
        "TECHM",
        "1,245.80",
        "+8.2%",
        "NSE",
        "",
        "2 hours ago",
        "",
        "",
        "",
        "bullish",
    ),
    (
        "5",
        "Top Gainers: Auto Stocks Lead Market Rally",
        "",
        "gainers",
        "TATAMOTORS",
        "985.10",
        "+4.1%",
        "NSE",
        "",
        "3 hours ago",
        "",
        "",
        "",
        "bullish",
    ),
    (
        "6",
        "Wall Street Ends Higher on Rate Cut Hopes",
        "US stocks closed higher as investors priced in rate cuts later in the year. "
        "The Nasdaq gained 1.2% led by chipmakers.",
        "global",
        "",
        "",
        "",
        "",
        "",
        "4 hours ago",
        "",
        "",
        "",
        "neutral",
    ),
)

TEST_ARTICLES: tuple[dict[str, str], ...] = (
    {
        "title": "Breaking: Sensex Crosses 80,000 Mark in Historic Rally",
        "content": "BSE Sensex crossed 80,000 points for the first time, surging 2.1% on strong "
        "buying in banking, IT and pharma stocks. Market breadth stayed positive with advancers "
        "outnumbering decliners 3:1.",
        "category": "nifty",
        "stock_symbol": "SENSEX",
        "stock_price": "80,125",
        "price_change": "+2.1%",
        "exchange": "BSE",
        "time_ago": "Just now",
    },
    {
        "title": "Reliance Industries Announces Major Green Energy Investment",
        "content": "Reliance Industries announced a Rs 75,000 crore investment in renewable energy "
        "over the next three years, covering solar manufacturing, battery storage and green hydrogen.",
        "category": "breakout",
        "stock_symbol": "RELIANCE",
        "stock_price": "2,845",
        "price_change": "+4.2%",
        "exchange": "NSE",
        "time_ago": "2 minutes ago",
    },
)


@dataclass(slots=True)
class StaticRowSource:
    """A row source backed by an in-memory list."""

    rows: list[RawRow] = field(default_factory=lambda: [list(row) for row in SAMPLE_ROWS])

    def fetch_rows(self) -> list[RawRow]:
        return [list(row) for row in self.rows]


__all__ = ["SAMPLE_ROWS", "TEST_ARTICLES", "StaticRowSource"]
