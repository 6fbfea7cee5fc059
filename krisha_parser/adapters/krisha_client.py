"""
HTTP adapter for krisha.kz.
Fetches raw markup for search pages, listing pages and the price-analytics
fragment. Every request carries browser-like headers and a finite timeout.
"""
from typing import Optional

import httpx

from krisha_parser.config import config
from krisha_parser.errors import UpstreamError
from krisha_parser.utils.logger import LayerLogger


BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "ru-RU,ru;q=0.8,en-US;q=0.5,en;q=0.3",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


class KrishaClient:
    """
    Document loader for the listings site.
    
    ``transport`` lets callers swap the network layer (tests pass an
    ``httpx.MockTransport``).
    """
    
    def __init__(
        self,
        timeout: Optional[float] = None,
        analytics_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.analytics_timeout = analytics_timeout or config.ANALYTICS_TIMEOUT
        if min(self.timeout, self.analytics_timeout) <= 0:
            raise ValueError("Request timeouts must be positive")
        self.transport = transport
        self.logger = LayerLogger("krisha_client")
    
    def _get_headers(self) -> dict:
        """Get request headers mimicking a browser."""
        return dict(BROWSER_HEADERS)
    
    def _get_analytics_headers(self, referer: str) -> dict:
        """Headers for the XHR-style analytics request."""
        headers = self._get_headers()
        headers.pop("Upgrade-Insecure-Requests", None)
        headers.update({
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Referer": referer,
            "X-Requested-With": "XMLHttpRequest",
            "Cache-Control": "no-cache",
        })
        return headers
    
    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=self.transport,
        )
    
    async def fetch_document(self, url: str) -> str:
        """
        Fetch a primary document (search page or listing page).
        
        Raises:
            UpstreamError: on transport failure or non-success status.
        """
        self.logger.log_action("fetch_document", "started", url=url)
        
        try:
            async with self._client(self.timeout) as client:
                response = await client.get(url, headers=self._get_headers())
        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Failed to fetch URL: {str(e)}",
                error_type="transport_error",
                url=url
            )
            raise UpstreamError(url, reason=str(e) or type(e).__name__) from e
        
        if not response.is_success:
            self.logger.log_http_fetch(url, response.status_code, "rejected")
            raise UpstreamError(url, status_code=response.status_code)
        
        html = response.text
        self.logger.log_action(
            "fetch_document",
            "completed",
            url=url,
            status_code=response.status_code,
            content_length=len(html)
        )
        return html
    
    async def fetch_analytics(self, advert_id: str, referer: str) -> Optional[str]:
        """
        Fetch the price-analytics fragment for one listing.
        
        Returns None on any failure; analytics never abort a request.
        """
        url = config.analytics_url(advert_id)
        
        try:
            async with self._client(self.analytics_timeout) as client:
                response = await client.get(url, headers=self._get_analytics_headers(referer))
        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Analytics request failed: {str(e)}",
                error_type="analytics_transport_error",
                url=url
            )
            return None
        
        if not response.is_success:
            self.logger.log_http_fetch(url, response.status_code, "rejected")
            return None
        
        self.logger.log_http_fetch(
            url,
            response.status_code,
            "ok",
            content_length=len(response.text)
        )
        return response.text
