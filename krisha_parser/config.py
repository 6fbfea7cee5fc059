"""
Configuration management for the Krisha listings parser.
Handles environment variables and application settings.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""
    
    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    
    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console
    
    # Request settings (seconds, must stay finite)
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "30"))
    ANALYTICS_TIMEOUT: float = float(os.getenv("ANALYTICS_TIMEOUT", "10"))
    
    # Source site
    KRISHA_BASE_URL: str = os.getenv("KRISHA_BASE_URL", "https://krisha.kz")
    SEARCH_PATH: str = os.getenv("SEARCH_PATH", "/prodazha/kvartiry")
    ANALYTICS_PATH: str = os.getenv("ANALYTICS_PATH", "/analytics/aPriceAnalysis/")
    
    # Image CDN hosts
    LISTING_IMAGE_HOST: str = os.getenv("LISTING_IMAGE_HOST", "alaps-photos-kr.kcdn.kz")
    CARD_IMAGE_HOST: str = os.getenv("CARD_IMAGE_HOST", "alakcell-photos-kr.kcdn.kz")
    
    # Listings per results page, used when the total count has to be estimated
    PAGE_SIZE_ESTIMATE: int = int(os.getenv("PAGE_SIZE_ESTIMATE", "20"))
    
    @classmethod
    def search_url(cls) -> str:
        """Base URL for search-results pages (without city)."""
        return cls.KRISHA_BASE_URL.rstrip("/") + cls.SEARCH_PATH
    
    @classmethod
    def analytics_url(cls, advert_id: str) -> str:
        """Price-analytics endpoint for one listing."""
        return f"{cls.KRISHA_BASE_URL.rstrip('/')}{cls.ANALYTICS_PATH}?id={advert_id}"


config = Config()
