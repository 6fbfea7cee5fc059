"""
Detail Layer for the Krisha listings parser.
Fetches one listing page, extracts the full record and merges price
analytics from the analytics endpoint.
"""
from typing import Optional

from krisha_parser.adapters.krisha_client import KrishaClient
from krisha_parser.errors import ContentNotFoundError, InvalidRequestError
from krisha_parser.extractors.detail import DetailExtraction, extract_detail
from krisha_parser.extractors.price_analytics import PriceAnalyticsMerger
from krisha_parser.utils.logger import LayerLogger

SITE_MARKER = "krisha.kz"


class DetailLayer:
    """
    Detail Layer - one listing per call.
    
    The analytics fetch runs after the page is parsed and before the record
    is returned; its failure only empties the market-price block.
    """
    
    def __init__(self, client: Optional[KrishaClient] = None):
        self.logger = LayerLogger("detail_layer")
        self.client = client or KrishaClient()
        self.merger = PriceAnalyticsMerger(self.client.fetch_analytics)
    
    async def fetch_listing(self, url: str) -> DetailExtraction:
        if not url or SITE_MARKER not in url:
            raise InvalidRequestError("Неверная ссылка на krisha.kz")
        
        self.logger.log_action("listing", "started", url=url)
        html = await self.client.fetch_document(url)
        return await self.parse(html, url)
    
    async def parse(self, html: str, url: str) -> DetailExtraction:
        """Extract a listing page that has already been fetched."""
        try:
            extraction = await extract_detail(html, url, self.merger)
        except ContentNotFoundError:
            self.logger.log_error(
                "Neither title nor price found",
                error_type="content_not_found",
                url=url
            )
            raise
        
        self._log_provenance(extraction, url)
        
        detail = extraction.detail
        self.logger.log_extraction(
            kind="listing_detail",
            fields_present=detail.get_present_fields(),
            fields_missing=detail.get_missing_fields(),
            url=url,
            images=len(detail.images),
            features=len(detail.features)
        )
        return extraction
    
    def _log_provenance(self, extraction: DetailExtraction, url: str):
        images = extraction.images
        if images.source != "meta_uuid":
            self.logger.log_fallback(
                from_source="meta_uuid",
                to_source=images.source,
                reason="Preview image missing or without uuid/prefix",
                url=url
            )
        
        analytics = extraction.analytics
        if not analytics.advert_id:
            self.logger.log_decision(
                decision="skip_analytics_fetch",
                reason="No listing id in URL",
                url=url
            )
        if analytics.source != "analytics_endpoint":
            self.logger.log_fallback(
                from_source="analytics_endpoint",
                to_source=analytics.source,
                reason="Analytics endpoint gave no listing or district price",
                url=url,
                fetched=analytics.fetched
            )
        else:
            self.logger.log_decision(
                decision="use_analytics_endpoint",
                reason="Endpoint returned listing or district price",
                url=url,
                advert_id=analytics.advert_id
            )
