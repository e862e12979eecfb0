import logging

from fastapi import APIRouter, HTTPException

from link_crawler.core import LinkCrawler
from .cache import cache_report, get_cached_report, is_cache_healthy
from .schemas import CrawlRequest, CrawlResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/crawl", response_model=CrawlResponse, summary="Crawl a site and list every reachable page")
async def crawl_site(request: CrawlRequest) -> CrawlResponse:
    """
    Follows anchor links from `url` and returns every page reached, in visit order.

    - Serves a cached report when the same request was crawled recently.
    - Reports with timed-out pages are not cached.
    - Pages that time out or fail are listed under `failures`; they don't stop the crawl.
    - Returns 502 when the seed page itself can't be fetched.
    """
    params = request.model_dump()

    cached = get_cached_report(params)
    if cached:
        logger.info("Cache hit for %s", request.url)
        return CrawlResponse(**cached, cached=True)

    # InvalidURL from the crawler is mapped to 422 in main.py
    crawler = LinkCrawler(request.url, **request.crawler_options())
    report = await crawler.run()

    if report.seed in report.failed_urls and len(report.visited) == 1:
        # only the seed was visited and it failed; don't cache
        raise HTTPException(status_code=502, detail=f"Failed to reach URL: {report.failures[0].message}")

    response_data = report.to_dict()
    if report.has_timeouts:
        logger.info("Not caching %s: report has timed-out pages", request.url)
    else:
        cache_report(params, response_data)
    return CrawlResponse(**response_data, cached=False)


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check() -> HealthResponse:
    cache_status = "connected" if is_cache_healthy() else "unavailable"
    return HealthResponse(status="ok", cache=cache_status)
