# recipebox/services/text.py
from typing import Iterable


def normalize(text: str) -> str:
    """Case-insensitive comparison key."""
    return text.casefold()


def normalize_all(values: Iterable[str]) -> list[str]:
    return [normalize(value) for value in values]


def contains_ignore_case(text: str, term: str) -> bool:
    if not term:
        return True
    return normalize(term) in normalize(text)


def split_csv(raw: str | None) -> list[str]:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]
