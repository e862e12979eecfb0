import logging
from typing import Optional

from .errors import ExtractionFailed
from .fetcher import fetch_page
from .models import HtmlElement
from .parser import select_elements

logger = logging.getLogger(__name__)


async def extract_html(
    url: str,
    selector: str,
    cookie: Optional[str] = None,
    timeout: Optional[float] = None,
) -> list[HtmlElement]:
    """
    Fetch a page and return the elements matching `selector`.
    This is the only place the crawler touches the network.
    """
    html, status_code, final_url = await fetch_page(url, cookie=cookie, timeout=timeout)
    if final_url != url:
        logger.debug("Redirected %s -> %s (%d)", url, final_url, status_code)

    try:
        return select_elements(html, selector)
    except Exception as exc:
        raise ExtractionFailed(url, f"parse error: {exc}") from exc
