import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from link_crawler.errors import InvalidURL
from .middleware import RequestLoggingMiddleware
from .routes import router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Link Crawler", version="1.0.0")
app.add_middleware(RequestLoggingMiddleware)
app.include_router(router)


@app.exception_handler(InvalidURL)
async def invalid_url_handler(request: Request, exc: InvalidURL):
    # seed passed schema validation but the crawler can't parse it
    logger.info("Rejected seed %s: %s", exc.url, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc), "code": "invalid_url"})


@app.exception_handler(Exception)
async def crawl_crashed_handler(request: Request, exc: Exception):
    logger.error("Crawl aborted by unexpected error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "The crawl aborted unexpectedly.", "code": "crawl_aborted"},
    )
