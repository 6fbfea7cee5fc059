"""
Card and search-results page extraction.

A broken card is skipped and reported in the result; it never aborts the
page. Advertisement blocks are recognized and skipped before extraction.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from krisha_parser.extractors import fields
from krisha_parser.extractors.pagination import resolve_pagination, resolve_total_found
from krisha_parser.models.listing import ListingSummary, PaginationInfo

CARD_SELECTOR = ".a-card"


@dataclass
class SkippedCard:
    """A card that produced no summary, and why."""
    position: int
    reason: str
    card_id: Optional[str] = None


@dataclass
class ListingPageResult:
    """Everything extracted from one search-results document."""
    summaries: List[ListingSummary]
    pagination: PaginationInfo
    total_found: int
    total_source: str = "emitted_count"
    skipped: List[SkippedCard] = field(default_factory=list)
    advertisements: int = 0


def extract_card(card: Tag) -> Tuple[Optional[ListingSummary], str]:
    """
    Run the field extractors over one card.
    
    Returns (summary, "") on success or (None, reason) when the card lacks
    an identifier, a uuid, a title or a price.
    """
    identifiers = fields.card_identifiers(card)
    if identifiers is None:
        return None, "missing_identifier"
    listing_id, uuid = identifiers
    
    title = fields.card_title(card)
    price = fields.card_price(card)
    if not title or not price:
        return None, "missing_title_or_price"
    
    area, floor = fields.area_floor_from_title(title)
    
    summary = ListingSummary(
        id=listing_id,
        uuid=uuid,
        title=title,
        price=price,
        area=area,
        floor=floor,
        address=fields.card_address(card),
        description=fields.card_description(card),
        views=fields.card_views(card),
        image_url=fields.card_image_url(card),
        url=fields.card_url(card),
        is_urgent=fields.card_is_urgent(card),
        features=fields.card_features(card),
    )
    return summary, ""


def extract_listing_page(html: str) -> ListingPageResult:
    """Extract summaries, pagination and the total count from a results page."""
    soup = BeautifulSoup(html, "lxml")
    
    summaries: List[ListingSummary] = []
    skipped: List[SkippedCard] = []
    advertisements = 0
    
    for position, card in enumerate(soup.select(CARD_SELECTOR)):
        if fields.is_advertisement(card):
            advertisements += 1
            continue
        
        try:
            summary, reason = extract_card(card)
        except (AttributeError, TypeError, ValueError) as e:
            summary, reason = None, f"malformed_card: {type(e).__name__}: {e}"
        
        if summary is None:
            skipped.append(SkippedCard(position=position, reason=reason, card_id=card.get("data-id")))
            continue
        summaries.append(summary)
    
    pagination = resolve_pagination(soup)
    total_found, total_source = resolve_total_found(soup, pagination, len(summaries))
    
    return ListingPageResult(
        summaries=summaries,
        pagination=pagination,
        total_found=total_found,
        total_source=total_source,
        skipped=skipped,
        advertisements=advertisements,
    )
