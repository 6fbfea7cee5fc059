"""Text normalization helpers shared by the extractors."""
import re
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

_WHITESPACE_RE = re.compile(r"\s+")
_GROUPED_NUMBER_RE = re.compile(r"\d+(?:\s+\d+)*")


def clean_text(value: Optional[str]) -> str:
    """Collapse whitespace runs into single spaces and trim."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def truncate(value: str, limit: int) -> str:
    """Cut text to at most ``limit`` characters."""
    return value[:limit] if len(value) > limit else value


def parse_grouped_int(value: str) -> Optional[int]:
    """
    Parse a digit sequence that may be grouped with spaces.
    
    "9 778" -> 9778, "12" -> 12, "abc" -> None
    """
    match = _GROUPED_NUMBER_RE.search(value or "")
    if not match:
        return None
    return int(re.sub(r"\s+", "", match.group()))


def parse_positive_int(value: Optional[str]) -> Optional[int]:
    """Parse a leading integer the way a browser parseInt would; None unless > 0."""
    match = re.match(r"\s*(\d+)", value or "")
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


def first_non_empty(strategies: Iterable[Callable[[], T]], default: T) -> T:
    """Run strategies in order and return the first truthy result."""
    for strategy in strategies:
        result = strategy()
        if result:
            return result
    return default


def dedupe(items: Iterable[str]) -> list:
    """Drop empty and repeated strings, keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result
