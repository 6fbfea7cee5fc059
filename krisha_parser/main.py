"""
Krisha Listings Parser - FastAPI Application
Main entry point with REST API endpoints.
"""
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from krisha_parser import __version__
from krisha_parser.config import config
from krisha_parser.errors import ContentNotFoundError, InvalidRequestError, UpstreamError
from krisha_parser.layers.detail import DetailLayer
from krisha_parser.layers.search import SearchLayer, build_filter_url
from krisha_parser.models.listing import SearchFilters
from krisha_parser.utils.logger import get_logger, set_trace_id


# Initialize FastAPI app
app = FastAPI(
    title="Krisha Listings Parser",
    description="Extracts structured apartment listings from krisha.kz",
    version=__version__,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize layers
search_layer = SearchLayer()
detail_layer = DetailLayer()

logger = get_logger("main")


# Request models
class ParseListingRequest(BaseModel):
    """Request model for listing detail parsing."""
    url: Optional[str] = None


def _error(status_code: int, message: str, details: Optional[str] = None) -> HTTPException:
    detail = {"error": message}
    if details:
        detail["details"] = details
    return HTTPException(status_code=status_code, detail=detail)


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/parse-filters")
async def parse_filters_info():
    """Usage information for the search endpoint."""
    return {
        "message": "Krisha.kz Filters Parser API готов к работе",
        "usage": "POST /api/parse-filters with { city, priceFrom, priceTo, rooms, page }",
        "example": {
            "city": "astana",
            "priceFrom": "10000000",
            "priceTo": "40000000",
            "rooms": "1",
            "page": 1,
        },
        "response": {
            "apartments": "Array<ApartmentCard>",
            "total": "number - общее количество найденных объявлений",
            "totalPages": "number - общее количество страниц",
            "currentPage": "number - текущая страница",
            "hasNextPage": "boolean - есть ли следующая страница",
            "url": "string - сформированный URL для парсинга",
            "filters": "FilterParams - использованные параметры фильтрации",
        },
        "version": __version__,
    }


@app.post("/api/parse-filters")
async def parse_filters(filters: SearchFilters):
    """
    Parse one search-results page for the given filters.
    
    Returns the listing cards plus pagination and the total count.
    """
    trace_id = set_trace_id()
    
    logger.info(
        "search_request",
        city=filters.city,
        rooms=filters.rooms,
        page=filters.page,
        trace_id=trace_id
    )
    
    try:
        result = await search_layer.search(filters)
    except InvalidRequestError as e:
        raise _error(400, str(e))
    except UpstreamError as e:
        logger.error("search_upstream_error", error=str(e), url=e.url)
        raise _error(
            502,
            "Ошибка при парсинге страницы. Проверьте параметры и попробуйте позже.",
            str(e)
        )
    except Exception as e:
        logger.error("search_error", error=str(e), city=filters.city)
        raise _error(
            500,
            "Ошибка при парсинге страницы. Проверьте параметры и попробуйте позже.",
            str(e)
        )
    
    return {
        "apartments": [s.model_dump(by_alias=True) for s in result.summaries],
        "total": result.total_found,
        "totalPages": result.pagination.total_pages,
        "currentPage": filters.page,
        "hasNextPage": result.pagination.has_next_page,
        "url": build_filter_url(filters),
        "filters": filters.model_dump(by_alias=True),
        "trace_id": trace_id,
    }


@app.get("/api/parse-krisha")
async def parse_listing_info():
    """Usage information for the listing endpoint."""
    return {
        "message": "Krisha.kz Parser API готов к работе",
        "usage": 'POST /api/parse-krisha with { url: "https://krisha.kz/..." }',
        "version": __version__,
    }


@app.post("/api/parse-krisha")
async def parse_listing(request: ParseListingRequest):
    """
    Parse one listing page into a full record with price analytics.
    """
    trace_id = set_trace_id()
    
    logger.info("listing_request", url=request.url, trace_id=trace_id)
    
    try:
        extraction = await detail_layer.fetch_listing(request.url or "")
    except InvalidRequestError as e:
        raise _error(400, str(e))
    except ContentNotFoundError:
        raise _error(
            422,
            "Не удалось извлечь данные из объявления. Возможно, изменилась структура страницы или объявление удалено."
        )
    except UpstreamError as e:
        logger.error("listing_upstream_error", error=str(e), url=request.url)
        raise _error(
            502,
            "Ошибка при парсинге объявления. Проверьте ссылку и попробуйте позже.",
            str(e)
        )
    except Exception as e:
        logger.error("listing_error", error=str(e), url=request.url)
        raise _error(
            500,
            "Ошибка при парсинге объявления. Проверьте ссылку и попробуйте позже.",
            str(e)
        )
    
    return {
        "data": extraction.detail.model_dump(by_alias=True),
        "trace_id": trace_id,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
