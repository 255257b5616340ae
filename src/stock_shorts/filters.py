"""Text checks shared by content synthesis and image selection."""

from __future__ import annotations

from typing import Iterable


# Filler phrases the spreadsheet authors leave in place of a real body.
BOILERPLATE_PHRASES = (
    "Domestic indices extended gains",
    "Technical analysts highlight",
)


def match_keywords(text: str, keywords: Iterable[str]) -> list[str]:
    lowered = text.lower()
    matched: list[str] = []
    for keyword in keywords:
        normalized = keyword.strip().lower()
        if normalized and normalized in lowered:
            matched.append(keyword.strip())
    return matched


def combined_text(*parts: str | None) -> str:
    return " ".join(part.strip() for part in parts if part and part.strip()).lower()


def is_blank(text: str | None) -> bool:
    return not text or not text.strip()


def is_boilerplate(text: str | None) -> bool:
    if is_blank(text):
        return False
    return any(phrase in text for phrase in BOILERPLATE_PHRASES)


def strip_boilerplate(text: str) -> str:
    """Remove filler phrases, repeating until none can reappear from the remainder."""
    previous = None
    while previous != text:
        previous = text
        for phrase in BOILERPLATE_PHRASES:
            text = text.replace(phrase, "")
    return text


__all__ = [
    "BOILERPLATE_PHRASES",
    "match_keywords",
    "combined_text",
    "is_blank",
    "is_boilerplate",
    "strip_boilerplate",
]
