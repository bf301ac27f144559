import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address

from aione.dependencies import Services, get_services
from aione.errors import EmptyData, FetchFailure, InvalidInput, NoElements
from aione.models.element import ExtractionResult
from aione.models.scrape_request import ExportRequest, ExtractRequest, ScrapeRequest
from aione.models.scrape_response import ExtractResponse, ScrapeResponse
from aione.services.exporter import export_result
from aione.services.extractor import extract
from aione.services.fetcher import normalize_url
from aione.services.mapper import extract_selected
from aione.services.storage import make_key

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(tags=["Web scraper"])


def _result_key(url: str) -> str:
    # "https://example.com" and "https://example.com/" name the same page
    return make_key("scraper", "result", url.rstrip("/"))


@router.post("/scrape", response_model=ScrapeResponse, summary="Analyse a page into selectable elements")
@limiter.limit("10/minute")
async def scrape(
    request: Request,
    body: ScrapeRequest,
    services: Services = Depends(get_services),
) -> ScrapeResponse:
    """Fetch *url* through the configured proxies and list its elements.

    The result replaces any earlier result stored for the same URL and is the
    one ``POST /extract`` resolves element ids against.
    """
    logger.info("Scrape request received", extra={"url": body.url})

    try:
        result = await extract(
            body.url,
            services.settings.proxy_endpoints,
            client=services.http_client,
        )
    except InvalidInput as exc:
        logger.warning("Invalid URL: %s – %s", body.url, exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except FetchFailure as exc:
        logger.error("Error fetching URL %s: %s", body.url, exc)
        raise HTTPException(status_code=502, detail=str(exc))
    except NoElements as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    services.store.set(_result_key(result.url), result.model_dump(mode="json"))

    return ScrapeResponse(url=result.url, elements=result.elements, element_count=len(result.elements))


@router.post("/extract", response_model=ExtractResponse, summary="Extract the selected elements")
async def extract_elements(
    body: ExtractRequest,
    services: Services = Depends(get_services),
) -> ExtractResponse:
    """Resolve *element_ids* against the last ``/scrape`` result for *url*."""
    url = normalize_url(body.url)

    if not body.element_ids:
        raise HTTPException(status_code=400, detail="Select at least one element to extract.")

    raw = services.store.get(_result_key(url))
    if raw is None:
        raise HTTPException(status_code=404, detail=f"No analysed page for {url}. Call /scrape first.")

    data = extract_selected(ExtractionResult.model_validate(raw), body.element_ids)

    logger.info("Extracted %d fields from %s", len(data), url)
    return ExtractResponse(url=url, data=data)


@router.post("/export", summary="Download extracted data as JSON or CSV")
async def export(body: ExportRequest) -> Response:
    try:
        export_file = export_result(body.data, body.format)
    except EmptyData as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return Response(
        content=export_file.content,
        media_type=export_file.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export_file.filename}"'},
    )
