import logging
from typing import Awaitable, Callable, Optional

from .errors import InvalidURL
from .models import HtmlElement
from .scraper import extract_html as default_extract_html
from .urls import finalize_links, is_http_url, normalize_url, resolve_link

logger = logging.getLogger(__name__)

ExtractHtml = Callable[..., Awaitable[list[HtmlElement]]]

ANCHOR_SELECTOR = "a"


def _resolve_all(hrefs: list[str], base_url: str, uniform: bool) -> list[str]:
    resolved = []
    for href in hrefs:
        try:
            link = resolve_link(href.strip(), base_url)
            if uniform:
                link = normalize_url(link)
        except InvalidURL as exc:
            # bare relative paths, "#top", empty hrefs
            logger.debug("Dropping unresolvable href %r on %s: %s", href, base_url, exc.reason)
            continue
        if not is_http_url(link):
            logger.debug("Dropping non-http link %s on %s", link, base_url)
            continue
        resolved.append(link)
    return resolved


async def extract_links(
    url: str,
    base_url: str,
    extract_html: ExtractHtml = default_extract_html,
    uniform: bool = True,
    cookie: Optional[str] = None,
) -> list[str]:
    """
    Fetch `url` and return its outbound links as a sorted, duplicate-free list
    of absolute URLs, resolved against `base_url`.

    A page without anchors gives an empty list. ExtractionFailed from the
    collaborator is left for the caller.
    """
    if cookie:
        elements = await extract_html(url, ANCHOR_SELECTOR, cookie)
    else:
        elements = await extract_html(url, ANCHOR_SELECTOR)

    hrefs = [el.href for el in elements if el.href is not None]
    return finalize_links(_resolve_all(hrefs, base_url, uniform), uniform=uniform)
