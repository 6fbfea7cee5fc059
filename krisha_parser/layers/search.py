"""
Search Layer for the Krisha listings parser.
Turns filter selections into a results-page URL, fetches it and runs the
listing page extractor.
"""
from typing import Optional
from urllib.parse import urlencode

from krisha_parser.adapters.krisha_client import KrishaClient
from krisha_parser.config import config
from krisha_parser.errors import InvalidRequestError
from krisha_parser.extractors.listing_page import ListingPageResult, extract_listing_page
from krisha_parser.models.listing import SearchFilters
from krisha_parser.utils.logger import LayerLogger


def build_filter_url(filters: SearchFilters) -> str:
    """
    Build the search-results URL for a set of filters.
    
    Query parameters appear only when set; page is added only past page 1.
    """
    params = []
    if filters.rooms:
        params.append(("das[live.rooms]", filters.rooms))
    if filters.price_from:
        params.append(("das[price][from]", filters.price_from))
    if filters.price_to:
        params.append(("das[price][to]", filters.price_to))
    if filters.page and filters.page > 1:
        params.append(("page", str(filters.page)))
    
    return f"{config.search_url()}/{filters.city}/?{urlencode(params)}"


class SearchLayer:
    """
    Search Layer - one results page per call.
    
    Calls share no state, so pages can be fetched concurrently.
    """
    
    def __init__(self, client: Optional[KrishaClient] = None):
        self.logger = LayerLogger("search_layer")
        self.client = client or KrishaClient()
    
    async def search(self, filters: SearchFilters) -> ListingPageResult:
        if not filters.city:
            raise InvalidRequestError("Город обязателен")
        
        url = build_filter_url(filters)
        self.logger.log_action("search", "started", url=url, page=filters.page)
        
        html = await self.client.fetch_document(url)
        return self.parse(html, url)
    
    def parse(self, html: str, url: str = "") -> ListingPageResult:
        """Extract a results page that has already been fetched."""
        result = extract_listing_page(html)
        
        for skipped in result.skipped:
            self.logger.log_decision(
                decision="skip_card",
                reason=skipped.reason,
                url=url,
                card_id=skipped.card_id,
                position=skipped.position
            )
        
        if result.total_source == "page_estimate":
            self.logger.log_fallback(
                from_source="search_subtitle",
                to_source="page_estimate",
                reason="No listing count found in page text",
                url=url,
                total_pages=result.pagination.total_pages
            )
        
        self.logger.log_action(
            "search",
            "completed",
            url=url,
            summaries=len(result.summaries),
            skipped=len(result.skipped),
            advertisements=result.advertisements,
            total_found=result.total_found,
            total_source=result.total_source,
            total_pages=result.pagination.total_pages,
            has_next_page=result.pagination.has_next_page
        )
        return result
