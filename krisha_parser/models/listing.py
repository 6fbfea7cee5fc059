"""
Listing records produced by the extraction engine.

Every record is built fresh per request and returned to the caller as is.
String fields arrive already whitespace-collapsed from the extractors.
JSON output uses camelCase field names.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model serialized with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListingSummary(ApiModel):
    """One listing card from a search-results page."""
    id: str
    uuid: str
    title: str
    price: str
    area: str = ""
    floor: str = ""
    address: str = ""
    description: str = ""
    views: str = "0"
    image_url: str = ""
    url: str = ""
    is_urgent: bool = False
    features: List[str] = Field(default_factory=list)


class PaginationInfo(ApiModel):
    """Pagination state inferred from a results page."""
    total_pages: int = Field(default=1, ge=1)
    has_next_page: bool = False


class ContactInfo(ApiModel):
    """Seller contact block."""
    name: str = ""
    type: str = ""
    phone: str = ""


class ImageVariants(ApiModel):
    """Size renditions of the first listing image."""
    thumb: str
    medium: str
    large: str
    full: str


class PriceAnalytics(ApiModel):
    """
    Price comparison for one listing.
    
    All values are optional; an all-empty instance is a valid outcome
    when the analytics document is missing or unparsable.
    """
    this_listing: str = ""
    similar_in_district: str = ""
    similar_in_city: str = ""
    percentage_difference: str = ""
    
    def has_primary_values(self) -> bool:
        """True when this-listing or district value is known."""
        return bool(self.this_listing or self.similar_in_district)
    
    def is_empty(self) -> bool:
        return not (
            self.this_listing
            or self.similar_in_district
            or self.similar_in_city
            or self.percentage_difference
        )


class MarketPrice(ApiModel):
    """Market-price block attached to a listing detail."""
    this_listing: str = ""
    similar_in_region: str = ""
    similar_in_city: Optional[str] = None
    percentage_difference: str = ""
    
    @classmethod
    def from_analytics(cls, analytics: PriceAnalytics) -> "MarketPrice":
        """District comparable wins over the city one for the regional slot."""
        return cls(
            this_listing=analytics.this_listing,
            similar_in_region=analytics.similar_in_district or analytics.similar_in_city,
            similar_in_city=analytics.similar_in_city or None,
            percentage_difference=analytics.percentage_difference,
        )


class ListingDetail(ApiModel):
    """Full record for one listing page."""
    title: str = ""
    price: str = ""
    price_per_meter: str = ""
    city: str = ""
    district: str = ""
    building_type: str = ""
    complex: str = ""
    year_built: str = ""
    area: str = ""
    rooms: str = ""
    floor: str = ""
    ceiling_height: str = ""
    description: str = ""
    features: List[str] = Field(default_factory=list)
    contact: Optional[ContactInfo] = None
    views: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    image_variants: Optional[ImageVariants] = None
    market_price: MarketPrice = Field(default_factory=MarketPrice)
    
    def get_present_fields(self) -> List[str]:
        """Return names of non-empty fields."""
        return [name for name, value in self if value]
    
    def get_missing_fields(self) -> List[str]:
        """Return names of empty fields."""
        return [name for name, value in self if not value]


class SearchFilters(ApiModel):
    """User filter selections for a search-results page."""
    city: str = ""
    price_from: str = ""
    price_to: str = ""
    rooms: str = ""
    page: int = Field(default=1, ge=1)
