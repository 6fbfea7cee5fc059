"""Models package initialization."""
from krisha_parser.models.listing import (
    ListingSummary,
    PaginationInfo,
    ContactInfo,
    ImageVariants,
    MarketPrice,
    PriceAnalytics,
    ListingDetail,
    SearchFilters,
)

__all__ = [
    "ListingSummary",
    "PaginationInfo",
    "ContactInfo",
    "ImageVariants",
    "MarketPrice",
    "PriceAnalytics",
    "ListingDetail",
    "SearchFilters",
]
