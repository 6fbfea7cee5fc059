"""
Listing detail extraction.

Labelled blocks on the listing page are matched against two ordered rule
tables: "info items" (short facts under the price) and "parameters"
(the definition list further down). Unmatched labels are ignored.
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from krisha_parser.errors import ContentNotFoundError
from krisha_parser.extractors.fields import select_text
from krisha_parser.extractors.images import ImageResolution, build_image_variants, resolve_images
from krisha_parser.extractors.price_analytics import AnalyticsResolution, PriceAnalyticsMerger
from krisha_parser.models.listing import ContactInfo, ListingDetail, MarketPrice
from krisha_parser.utils.text import clean_text, dedupe, first_non_empty

ROOMS_RE = re.compile(r"(\d+)-комнатная")
AREA_RE = re.compile(r"(\d+(?:\.\d+)?)\s*м²")
FLOOR_RE = re.compile(r"(\d+/\d+)\s*этаж")

Pairs = List[Tuple[str, str]]


def _city_and_district(item: Tag, value: str) -> Pairs:
    """Split "Астана, Есильский р-н" into city and district on the first comma."""
    if "," not in value:
        return [("city", value)]
    city, district = value.split(",", 1)
    return [("city", clean_text(city)), ("district", clean_text(district.split(",")[0]))]


def _complex_name(item: Tag, value: str) -> Pairs:
    return [("complex", select_text(item, ".offer__advert-short-info a") or value)]


def _field(name: str) -> Callable[[Tag, str], Pairs]:
    return lambda item, value: [(name, value)]


def _feature(prefix: str) -> Callable[[Tag, str], Pairs]:
    return lambda item, value: [("feature", f"{prefix}: {value}")] if value else []


# (lower-cased title substring, handler); first matching rule wins per item
INFO_RULES = [
    ("город", _city_and_district),
    ("тип дома", _field("building_type")),
    ("жилой комплекс", _complex_name),
    ("год постройки", _field("year_built")),
    ("комнат", _field("rooms")),
    ("этаж", _field("floor")),
    ("площадь", _field("area")),
    ("балкон", _feature("Балкон")),
]

# (term substring, handler); more specific keys come first
PARAMETER_RULES = [
    ("Высота потолков", _field("ceiling_height")),
    ("Балкон остеклён", _feature("Балкон остеклён")),
    ("Дверь", _feature("Дверь")),
    ("Интернет", _feature("Интернет")),
    ("Парковка", _feature("Парковка")),
    ("Квартира меблирована", _feature("Меблирована")),
    ("Пол", _feature("Пол")),
    ("Безопасность", _feature("Безопасность")),
]


def _match_rule(rules, key: str, item: Tag, value: str) -> Pairs:
    for needle, handler in rules:
        if needle in key:
            return handler(item, value)
    return []


def info_item_pairs(soup: BeautifulSoup) -> Pairs:
    pairs: Pairs = []
    for item in soup.select(".offer__info-item"):
        title = select_text(item, ".offer__info-title").lower()
        value = select_text(item, ".offer__advert-short-info")
        pairs.extend(_match_rule(INFO_RULES, title, item, value))
    return pairs


def parameter_pairs(soup: BeautifulSoup) -> Pairs:
    pairs: Pairs = []
    for definition in soup.select(".offer__parameters dl"):
        key = select_text(definition, "dt")
        value = select_text(definition, "dd")
        pairs.extend(_match_rule(PARAMETER_RULES, key, definition, value))
    return pairs


def detail_title(soup: BeautifulSoup) -> str:
    return first_non_empty([
        lambda: select_text(soup, ".offer__advert-title h1"),
        lambda: select_text(soup, ".offer__advert-title"),
    ], "")


def detail_description(soup: BeautifulSoup) -> str:
    return first_non_empty([
        lambda: select_text(soup, ".js-description"),
        lambda: select_text(soup, ".offer__description .text"),
    ], "")


def rooms_from_title(title: str) -> str:
    match = ROOMS_RE.search(title)
    return f"{match.group(1)} комнаты" if match else ""


def area_from_title(title: str) -> str:
    match = AREA_RE.search(title)
    return f"{match.group(1)} м²" if match else ""


def floor_from_title(title: str) -> str:
    match = FLOOR_RE.search(title)
    return match.group(1) if match else ""


def detail_contact(soup: BeautifulSoup) -> Optional[ContactInfo]:
    name = select_text(soup, ".owners__name")
    kind = select_text(soup, ".label-user-agent")
    if not name and not kind:
        return None
    return ContactInfo(name=name, type=kind, phone=select_text(soup, ".a-phones .phone"))


@dataclass
class DetailDraft:
    """Detail record before price analytics are merged in."""
    detail: ListingDetail
    images: ImageResolution
    
    @property
    def has_content(self) -> bool:
        return bool(self.detail.title or self.detail.price)


def parse_detail(soup: BeautifulSoup) -> DetailDraft:
    """Run every field extractor over a listing document."""
    values = {}
    features: List[str] = []
    for name, value in info_item_pairs(soup) + parameter_pairs(soup):
        if name == "feature":
            features.append(value)
        else:
            values[name] = value
    
    features.extend(clean_text(label.get_text()) for label in soup.select(".paid-labels__item"))
    
    title = detail_title(soup)
    resolution = resolve_images(soup)
    
    detail = ListingDetail(
        title=title,
        price=select_text(soup, ".offer__price"),
        city=values.get("city", ""),
        district=values.get("district", ""),
        building_type=values.get("building_type", ""),
        complex=values.get("complex", ""),
        year_built=values.get("year_built", ""),
        area=values.get("area") or area_from_title(title),
        rooms=values.get("rooms") or rooms_from_title(title),
        floor=values.get("floor") or floor_from_title(title),
        ceiling_height=values.get("ceiling_height", ""),
        description=detail_description(soup),
        features=dedupe(features),
        contact=detail_contact(soup),
        views=select_text(soup, "#a-nb-views strong") or None,
        images=resolution.images,
        image_variants=build_image_variants(resolution.images),
    )
    return DetailDraft(detail=detail, images=resolution)


@dataclass
class DetailExtraction:
    """Finished detail record plus provenance for logging."""
    detail: ListingDetail
    images: ImageResolution
    analytics: AnalyticsResolution


async def extract_detail(html: str, url: str, merger: PriceAnalyticsMerger) -> DetailExtraction:
    """
    Extract a full listing record and merge price analytics into it.
    
    Raises:
        ContentNotFoundError: when the page has neither title nor price.
    """
    soup = BeautifulSoup(html, "lxml")
    draft = parse_detail(soup)
    if not draft.has_content:
        raise ContentNotFoundError(url)
    
    analytics = await merger.resolve(soup, url)
    
    detail = draft.detail
    detail.market_price = MarketPrice.from_analytics(analytics.analytics)
    detail.price_per_meter = detail.market_price.this_listing or detail.price
    
    return DetailExtraction(detail=detail, images=draft.images, analytics=analytics)
