"""
Error conditions surfaced to callers of the extraction engine.

Only upstream failures and missing content abort a request. Everything
else (missing fields, broken cards, analytics failures) degrades the
result instead of failing it.
"""
from typing import Optional


class ParserError(Exception):
    """Base class for all parser errors."""


class UpstreamError(ParserError):
    """Primary document fetch failed or returned a non-success status."""
    
    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        detail = f"HTTP error! status: {status_code}" if status_code else reason
        super().__init__(detail or "upstream request failed")


class ContentNotFoundError(ParserError):
    """Document fetched, but neither title nor price could be extracted."""
    
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No listing content found at {url}")


class InvalidRequestError(ParserError):
    """Caller supplied unusable input."""
