"""
Price analytics for listing detail pages.

The comparison figures live in a separate document served by the analytics
endpoint. Its markup changes often, so it is read with several strategies
in a fixed order; each strategy only fills fields that are still empty.
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from krisha_parser.models.listing import PriceAnalytics
from krisha_parser.utils.text import clean_text, dedupe

ADVERT_ID_PATTERNS = [
    re.compile(r"/show/(\d+)"),
    re.compile(r"/a/(\d+)"),
    re.compile(r"id[=:](\d+)"),
    re.compile(r"(\d{10,})"),
]

CURRENCY_RE = re.compile(r"(\d+(?:\s+\d+)*)\s*₸")

THIS_LISTING_SELECTOR = '.green-price, .price-green, [style*="color: green"], [class*="green"]'
DISTRICT_SELECTOR = '.blue-price, .price-blue, [style*="color: blue"], [class*="blue"]'
CITY_SELECTOR = ".white-blue-price, .price-city, .city-price"

ROW_SELECTOR = "table tr, .analytics-row, .price-row"
CELL_SELECTOR = "td, .cell, .price-cell"

PRICE_LABELS = [
    "этого объявления",
    "данного объявления",
    "этой квартиры",
    "похожих в районе",
    "в районе",
    "похожих в городе",
    "в городе",
    "среднее по району",
    "среднее по городу",
]

PERCENT_SELECTORS = [".percent, .percentage", ".difference"]
PERCENT_PATTERNS = [
    re.compile(r"(На\s+[\d,]+%\s+(?:дешевле|дороже))", re.IGNORECASE),
    re.compile(r"([\d,]+%\s+(?:дешевле|дороже))", re.IGNORECASE),
    re.compile(r"([+-]?[\d,]+%)"),
]

# Blocks on the listing page itself that may carry the same figures
SAME_DOCUMENT_REGIONS = ".offer__price-analytics, .price-analytics, [class*='analytics']"


def extract_advert_id(url: str) -> Optional[str]:
    """Listing id from a listing URL, trying the known URL shapes in order."""
    for pattern in ADVERT_ID_PATTERNS:
        match = pattern.search(url or "")
        if match:
            return match.group(1)
    return None


def currency_value(text: str) -> str:
    """First currency-suffixed number in text, as "<digits> ₸"."""
    match = CURRENCY_RE.search(text or "")
    return clean_text(f"{match.group(1)} ₸") if match else ""


def _first_text(soup: BeautifulSoup, selector: str) -> str:
    element = soup.select_one(selector)
    return clean_text(element.get_text()) if element else ""


def fill_from_colors(soup: BeautifulSoup, result: PriceAnalytics) -> None:
    """Green marks this listing, blue the district, neutral the city."""
    if not result.this_listing:
        result.this_listing = _first_text(soup, THIS_LISTING_SELECTOR)
    if not result.similar_in_district:
        result.similar_in_district = _first_text(soup, DISTRICT_SELECTOR)
    if not result.similar_in_city:
        result.similar_in_city = _first_text(soup, CITY_SELECTOR)


def fill_from_table(soup: BeautifulSoup, result: PriceAnalytics) -> None:
    """Rows 0, 1 and 2 hold this listing, district and city prices."""
    slots = ["this_listing", "similar_in_district", "similar_in_city"]
    for index, row in enumerate(soup.select(ROW_SELECTOR)[:len(slots)]):
        cells = row.select(CELL_SELECTOR)
        if len(cells) < 2:
            continue
        price = currency_value(cells[1].get_text())
        if price and not getattr(result, slots[index]):
            setattr(result, slots[index], price)


def _label_slot(label: str) -> str:
    if "этого" in label or "данного" in label or "этой" in label:
        return "this_listing"
    if "район" in label:
        return "similar_in_district"
    return "similar_in_city"


def _elements_with_text(soup: BeautifulSoup, needle: str) -> List[Tag]:
    """Innermost elements whose own text contains ``needle`` (case-insensitive)."""
    needle = needle.lower()
    elements, seen = [], set()
    for string in soup.find_all(string=lambda s: isinstance(s, NavigableString) and needle in s.lower()):
        parent = string.parent
        if isinstance(parent, Tag) and id(parent) not in seen:
            seen.add(id(parent))
            elements.append(parent)
    return elements


def fill_from_labels(soup: BeautifulSoup, result: PriceAnalytics) -> None:
    """Read prices printed next to localized labels."""
    for label in PRICE_LABELS:
        slot = _label_slot(label)
        for element in _elements_with_text(soup, label):
            if getattr(result, slot):
                break
            parent = element.parent
            nearby = [
                parent.get_text() if isinstance(parent, Tag) else element.get_text(),
                _sibling_text(element.find_next_sibling()),
                _sibling_text(element.find_previous_sibling()),
            ]
            price = currency_value(" ".join(nearby))
            if price:
                setattr(result, slot, price)


def _sibling_text(sibling: Optional[Tag]) -> str:
    return sibling.get_text() if sibling is not None else ""


def fill_from_document(soup: BeautifulSoup, result: PriceAnalytics) -> None:
    """Last resort: the first two prices on the page, in encounter order."""
    if result.this_listing:
        return
    prices = dedupe(
        clean_text(f"{match.group(1)} ₸")
        for match in CURRENCY_RE.finditer(soup.get_text())
    )
    if prices:
        result.this_listing = prices[0]
    if len(prices) > 1 and not result.similar_in_district:
        result.similar_in_district = prices[1]


def find_percentage(soup: BeautifulSoup) -> str:
    """Percentage difference, first match across the candidate texts."""
    texts = []
    for selector in PERCENT_SELECTORS:
        texts.extend(element.get_text() for element in soup.select(selector))
    texts.append(soup.get_text())
    
    for text in texts:
        for pattern in PERCENT_PATTERNS:
            match = pattern.search(text.strip())
            if match:
                return clean_text(match.group(1))
    return ""


def parse_analytics_soup(soup: BeautifulSoup, scan_document: bool = True) -> PriceAnalytics:
    result = PriceAnalytics()
    
    fill_from_colors(soup, result)
    if not result.this_listing or not result.similar_in_district:
        fill_from_table(soup, result)
    if not result.this_listing or not result.similar_in_district:
        fill_from_labels(soup, result)
    
    result.percentage_difference = find_percentage(soup)
    
    if scan_document:
        fill_from_document(soup, result)
    return result


def parse_analytics_html(html: str) -> PriceAnalytics:
    """Parse the analytics endpoint response."""
    return parse_analytics_soup(BeautifulSoup(html or "", "lxml"))


def parse_same_document(soup: BeautifulSoup) -> PriceAnalytics:
    """
    Analytics figures embedded in the listing page itself.
    
    Only dedicated analytics blocks are read; the listing page is full of
    unrelated prices, so the whole-document scan is skipped here.
    """
    regions = soup.select(SAME_DOCUMENT_REGIONS)
    if not regions:
        return PriceAnalytics()
    # nested matches would repeat their text
    region_ids = {id(region) for region in regions}
    regions = [r for r in regions if not any(id(p) in region_ids for p in r.parents)]
    fragment = BeautifulSoup("".join(str(region) for region in regions), "lxml")
    return parse_analytics_soup(fragment, scan_document=False)


@dataclass
class AnalyticsResolution:
    """Analytics result and where it came from."""
    analytics: PriceAnalytics
    source: str  # "analytics_endpoint", "same_document" or "none"
    advert_id: Optional[str] = None
    fetched: bool = False


class PriceAnalyticsMerger:
    """
    Fetch and merge price analytics for one listing.
    
    ``fetch`` is an async callable (advert_id, referer) -> html or None,
    normally ``KrishaClient.fetch_analytics``.
    """
    
    def __init__(self, fetch: Callable):
        self.fetch = fetch
    
    async def resolve(self, soup: BeautifulSoup, url: str) -> AnalyticsResolution:
        advert_id = extract_advert_id(url)
        
        remote = PriceAnalytics()
        fetched = False
        if advert_id:
            html = await self.fetch(advert_id, url)
            if html is not None:
                fetched = True
                remote = parse_analytics_html(html)
        
        # The endpoint is authoritative whenever it gave a primary figure,
        # even if the page itself would fill more fields.
        if remote.has_primary_values():
            return AnalyticsResolution(remote, "analytics_endpoint", advert_id, fetched)
        
        local = parse_same_document(soup)
        source = "none" if local.is_empty() else "same_document"
        return AnalyticsResolution(local, source, advert_id, fetched)
