"""
Pagination and total-count resolution for search-results pages.

Page numbers are gathered per source as independent sets and combined with
an explicit union at the call site.
"""
import re
from typing import Iterable, List, Set, Tuple

from bs4 import BeautifulSoup, Tag

from krisha_parser.config import config
from krisha_parser.models.listing import PaginationInfo
from krisha_parser.utils.text import parse_grouped_int, parse_positive_int

PAGINATOR_SELECTOR = ".paginator, .pagination, nav.paginator"
PAGE_BUTTON_SELECTOR = ".paginator__btn, .pagination__btn, .page-btn, a[data-page]"
PAGE_LINK_SELECTOR = 'a[href*="page="]'
NEXT_BUTTON_SELECTOR = (
    ".paginator__btn--next, .pagination__btn--next, .next, .page-next, [class*='next']"
)
ALT_NEXT_SELECTORS = [
    ".pagination .next",
    ".pager .next",
    'a[rel="next"]',
    ".page-next",
    ".next-page",
]

PAGE_PARAM_RE = re.compile(r"page=(\d+)")

SUBTITLE_SELECTOR = ".a-search-subtitle, .search-results-nb"
SUBTITLE_COUNT_RE = re.compile(r"Найдено\s+(\d+(?:\s+\d+)*)\s+объявлени", re.IGNORECASE)
HEADER_COUNT_SELECTORS = [
    ".search-results-header",
    ".results-count",
    ".found-count",
    ".search-results__count",
    ".listing-header",
    "h1",
    ".search-summary",
    ".page-title",
]
HEADER_COUNT_RE = re.compile(r"(\d+(?:\s+\d+)*)\s*(?:объявлени|результат|найден)", re.IGNORECASE)


def _select_all(scopes: Iterable[Tag], selector: str) -> List[Tag]:
    found = []
    for scope in scopes:
        found.extend(scope.select(selector))
    return found


def pages_from_data_attributes(scopes: List[Tag]) -> Set[int]:
    """Page numbers carried by data-page attributes on page buttons."""
    pages = set()
    for button in _select_all(scopes, PAGE_BUTTON_SELECTOR):
        number = parse_positive_int(button.get("data-page"))
        if number:
            pages.add(number)
    return pages


def pages_from_button_text(scopes: List[Tag]) -> Set[int]:
    """Page numbers printed on buttons that have no data-page attribute."""
    pages = set()
    for button in _select_all(scopes, PAGE_BUTTON_SELECTOR):
        if button.get("data-page"):
            continue
        number = parse_positive_int(button.get_text(strip=True))
        if number:
            pages.add(number)
    return pages


def pages_from_links(scopes: List[Tag]) -> Set[int]:
    """Page numbers from page=N query parameters in navigation links."""
    pages = set()
    for link in _select_all(scopes, PAGE_LINK_SELECTOR):
        match = PAGE_PARAM_RE.search(link.get("href") or "")
        if match and int(match.group(1)) > 0:
            pages.add(int(match.group(1)))
    return pages


def has_next_button(soup: BeautifulSoup, paginators: List[Tag]) -> bool:
    if paginators:
        return bool(_select_all(paginators, NEXT_BUTTON_SELECTOR))
    return any(soup.select_one(selector) is not None for selector in ALT_NEXT_SELECTORS)


def resolve_pagination(soup: BeautifulSoup) -> PaginationInfo:
    """
    Infer total pages and next-page availability.
    
    The paginator region is searched when present, otherwise the whole
    document. Total pages is the largest page number seen in any source.
    """
    paginators = soup.select(PAGINATOR_SELECTOR)
    scopes = paginators or [soup]
    
    pages = (
        pages_from_data_attributes(scopes)
        | pages_from_button_text(scopes)
        | pages_from_links(scopes)
    )
    
    return PaginationInfo(
        total_pages=max(pages) if pages else 1,
        has_next_page=has_next_button(soup, paginators),
    )


def count_from_subtitle(soup: BeautifulSoup) -> int:
    """Count from the "Найдено 9 778 объявлений" subtitle, or 0."""
    text = "".join(el.get_text() for el in soup.select(SUBTITLE_SELECTOR))
    match = SUBTITLE_COUNT_RE.search(text)
    if not match:
        return 0
    return parse_grouped_int(match.group(1)) or 0


def count_from_headers(soup: BeautifulSoup) -> int:
    """Largest "<N> объявлений/результатов/найдено" figure across header regions."""
    parts = []
    for selector in HEADER_COUNT_SELECTORS:
        parts.extend(el.get_text() for el in soup.select(selector))
    if soup.title:
        parts.append(soup.title.get_text())
    
    numbers = [parse_grouped_int(m.group(1)) or 0 for m in HEADER_COUNT_RE.finditer(" ".join(parts))]
    return max(numbers) if numbers else 0


def resolve_total_found(
    soup: BeautifulSoup,
    pagination: PaginationInfo,
    emitted: int,
) -> Tuple[int, str]:
    """
    Return (total listings found, source of the figure).
    
    Falls back to an estimate from the page count, and finally to the
    number of summaries emitted for this page.
    """
    total = count_from_subtitle(soup)
    if total:
        return total, "subtitle"
    
    total = count_from_headers(soup)
    if total:
        return total, "headers"
    
    if pagination.total_pages > 1:
        return max(pagination.total_pages * config.PAGE_SIZE_ESTIMATE, emitted), "page_estimate"
    
    return emitted, "emitted_count"
