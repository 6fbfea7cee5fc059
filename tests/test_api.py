"""Tests for the FastAPI endpoints."""
import httpx
import pytest
from fastapi.testclient import TestClient

from krisha_parser import main
from tests.conftest import ANALYTICS_HTML, LISTING_URL, make_card, make_detail_page, make_results_page, mock_transport


@pytest.fixture
def client():
    return TestClient(main.app)


@pytest.fixture
def use_routes(monkeypatch):
    """Point both layers at a MockTransport built from ``routes``."""
    def apply(routes):
        transport = mock_transport(routes)
        monkeypatch.setattr(main.search_layer.client, "transport", transport)
        monkeypatch.setattr(main.detail_layer.client, "transport", transport)
    return apply


class TestInfoEndpoints:
    
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
    
    def test_usage_documents(self, client):
        assert "POST /api/parse-filters" in client.get("/api/parse-filters").json()["usage"]
        assert "POST /api/parse-krisha" in client.get("/api/parse-krisha").json()["usage"]


class TestParseFilters:
    
    def test_search_response(self, client, use_routes):
        page = make_results_page(
            make_card(body='<span class="credit-badge">Ипотека</span>'),
            extra='<div class="a-search-subtitle">Найдено 1 512 объявлений</div>',
        )
        use_routes({"/prodazha/kvartiry/astana": (200, page)})
        
        response = client.post("/api/parse-filters", json={"city": "astana", "rooms": "2", "page": 1})
        
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1512
        assert body["totalPages"] == 1
        assert body["currentPage"] == 1
        assert body["hasNextPage"] is False
        assert body["url"].startswith("https://krisha.kz/prodazha/kvartiry/astana/?")
        assert body["filters"]["priceFrom"] == ""
        apartment = body["apartments"][0]
        assert apartment["isUrgent"] is False
        assert apartment["imageUrl"].endswith("/1-400x300.webp")
        assert apartment["features"] == ["Ипотека"]
        assert apartment["area"] == "45 м²"
    
    def test_city_required(self, client):
        response = client.post("/api/parse-filters", json={"rooms": "1"})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Город обязателен"
    
    def test_upstream_failure(self, client, use_routes):
        use_routes({"/": (503, "down")})
        response = client.post("/api/parse-filters", json={"city": "astana"})
        assert response.status_code == 502
        assert "503" in response.json()["detail"]["details"]


class TestParseListing:
    
    def test_listing_response(self, client, use_routes):
        use_routes({
            "/a/show": (200, make_detail_page()),
            "/analytics": (200, ANALYTICS_HTML),
        })
        
        response = client.post("/api/parse-krisha", json={"url": LISTING_URL})
        
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "2-комнатная квартира, 65 м², 5/12 этаж"
        assert data["pricePerMeter"] == "500 000 ₸"
        assert data["marketPrice"]["similarInRegion"] == "450 000 ₸"
        assert len(data["images"]) == 15
        assert data["imageVariants"]["medium"].endswith("/1-280x175.webp")
    
    def test_analytics_failure_still_succeeds(self, client, use_routes):
        use_routes({
            "/a/show": (200, make_detail_page()),
            "/analytics": httpx.ConnectError,
        })
        response = client.post("/api/parse-krisha", json={"url": LISTING_URL})
        assert response.status_code == 200
        assert response.json()["data"]["marketPrice"]["thisListing"] == ""
    
    def test_foreign_url_rejected(self, client):
        response = client.post("/api/parse-krisha", json={"url": "https://example.com/a/show/1"})
        assert response.status_code == 400
    
    def test_content_not_found(self, client, use_routes):
        use_routes({"/a/show": (200, "<html><body><p>Объявление удалено</p></body></html>")})
        response = client.post("/api/parse-krisha", json={"url": LISTING_URL})
        assert response.status_code == 422
    
    def test_upstream_failure(self, client, use_routes):
        use_routes({"/a/show": httpx.ConnectError})
        response = client.post("/api/parse-krisha", json={"url": LISTING_URL})
        assert response.status_code == 502
