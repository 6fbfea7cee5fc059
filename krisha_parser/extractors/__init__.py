"""Extractors package: pure functions from parsed markup to listing records."""
from krisha_parser.extractors.listing_page import ListingPageResult, extract_listing_page
from krisha_parser.extractors.detail import DetailDraft, parse_detail
from krisha_parser.extractors.images import ImageResolution, resolve_images, build_image_variants
from krisha_parser.extractors.price_analytics import (
    AnalyticsResolution,
    PriceAnalyticsMerger,
    extract_advert_id,
    parse_analytics_html,
)
from krisha_parser.extractors.pagination import resolve_pagination, resolve_total_found

__all__ = [
    "ListingPageResult",
    "extract_listing_page",
    "DetailDraft",
    "parse_detail",
    "ImageResolution",
    "resolve_images",
    "build_image_variants",
    "AnalyticsResolution",
    "PriceAnalyticsMerger",
    "extract_advert_id",
    "parse_analytics_html",
    "resolve_pagination",
    "resolve_total_found",
]
