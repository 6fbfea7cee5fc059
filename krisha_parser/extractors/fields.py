"""
Field extractors for search-result cards.

Each extractor takes a card fragment and returns one normalized value, or an
empty value when the field is missing. None of them raise for absent markup.
Fields with several possible sources list their strategies explicitly, in
precedence order.
"""
import re
from typing import Callable, List, Optional, Tuple

from bs4 import Tag

from krisha_parser.config import config
from krisha_parser.utils.text import clean_text, dedupe, first_non_empty, truncate

DESCRIPTION_LIMIT = 200

# "<area> м² ... <floor>/<floors> этаж", e.g. "2-комнатная, 45 м², 3/9 этаж"
TITLE_AREA_FLOOR_RE = re.compile(r"(\d+(?:\.\d+)?)\s*м².*?(\d+/\d+)\s*этаж")


def select_text(fragment: Tag, selector: str) -> str:
    """Concatenated text of every element matching ``selector``, normalized."""
    return clean_text("".join(el.get_text() for el in fragment.select(selector)))


def absolutize(src: str) -> str:
    """Protocol-relative CDN links get an explicit https scheme."""
    return src if src.startswith("http") else f"https:{src}"


def is_advertisement(card: Tag) -> bool:
    """Sponsored blocks share the card markup but carry campaign markers."""
    return "ddl_campaign" in (card.get("class") or []) or card.select_one(".adfox") is not None


def card_id(card: Tag) -> str:
    return clean_text(card.get("data-id"))


def card_uuid(card: Tag) -> str:
    return clean_text(card.get("data-uuid"))


def card_title(card: Tag) -> str:
    return select_text(card, ".a-card__title")


def card_price(card: Tag) -> str:
    return select_text(card, ".a-card__price")


def card_url(card: Tag) -> str:
    """Relative detail-page URL from the title link."""
    link = card.select_one(".a-card__title")
    return clean_text(link.get("href")) if link else ""


def card_address(card: Tag) -> str:
    return select_text(card, ".a-card__subtitle")


def card_description(card: Tag) -> str:
    return truncate(select_text(card, ".a-card__text-preview"), DESCRIPTION_LIMIT)


def card_views(card: Tag) -> str:
    return select_text(card, ".a-view-count") or "0"


def card_is_urgent(card: Tag) -> bool:
    return "is-urgent" in (card.get("class") or []) or "Срочно" in select_text(card, ".a-card__label")


# ---------------------------------------------------------------------------
# Image URL
# ---------------------------------------------------------------------------

def _image_from_uuid(card: Tag) -> str:
    """Build the CDN path from data-uuid; the folder is the uuid's first two chars."""
    uuid = card_uuid(card)
    if not uuid:
        return ""
    return f"https://{config.CARD_IMAGE_HOST}/webp/{uuid[:2]}/{uuid}/1-400x300.webp"


def _image_from_first(card: Tag, selector: str) -> str:
    img = card.select_one(selector)
    if img is None:
        return ""
    src = img.get("src") or img.get("data-src")
    if src and config.CARD_IMAGE_HOST in src:
        return absolutize(src)
    return ""


def image_url_strategies(card: Tag) -> List[Callable[[], str]]:
    """Image URL sources in precedence order."""
    return [
        lambda: _image_from_uuid(card),
        lambda: _image_from_first(card, "picture img"),
        lambda: _image_from_first(card, "img"),
    ]


def card_image_url(card: Tag) -> str:
    return first_non_empty(image_url_strategies(card), "")


# ---------------------------------------------------------------------------
# Area / floor
# ---------------------------------------------------------------------------

def area_floor_from_title(title: str) -> Tuple[str, str]:
    """Derive ("45 м²", "3/9") from a card title, or empty strings."""
    match = TITLE_AREA_FLOOR_RE.search(title or "")
    if not match:
        return "", ""
    return f"{match.group(1)} м²", match.group(2)


# ---------------------------------------------------------------------------
# Feature tags
# ---------------------------------------------------------------------------

def _paid_service_tags(card: Tag) -> List[str]:
    """Hot / top / urgent paid-service tooltips."""
    return [select_text(icon, ".kr-tooltip__title") for icon in card.select(".paid-icon")]


def _credit_badges(card: Tag) -> List[str]:
    """Mortgage, installment and promotion badges."""
    return [clean_text(badge.get_text()) for badge in card.select(".credit-badge")]


def _mortgage_label(card: Tag) -> List[str]:
    return [select_text(card, ".a-is-mortgaged")]


def _complex_label(card: Tag) -> List[str]:
    return [select_text(card, ".a-card__complex-label")]


FEATURE_SOURCES = (_paid_service_tags, _credit_badges, _mortgage_label, _complex_label)


def card_features(card: Tag) -> List[str]:
    tags: List[str] = []
    for source in FEATURE_SOURCES:
        tags.extend(source(card))
    return dedupe(tags)


def card_identifiers(card: Tag) -> Optional[Tuple[str, str]]:
    """Return (id, uuid) or None when either is missing."""
    listing_id, uuid = card_id(card), card_uuid(card)
    if not listing_id or not uuid:
        return None
    return listing_id, uuid
