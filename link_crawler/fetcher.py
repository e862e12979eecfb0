import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Optional

import requests

from .errors import ExtractionFailed

logger = logging.getLogger(__name__)

# realistic browser UA, avoids most trivial bot blocks
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

# upper bound for requests; a shorter per-page budget from the crawler wins
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT_SECONDS", "15"))
MAX_CONTENT_BYTES = 5 * 1024 * 1024  # 5 MB ceiling to avoid runaway pages


def _sync_fetch(url: str, cookie: Optional[str] = None, timeout: float = FETCH_TIMEOUT) -> tuple[str, int, str]:
    """Synchronous GET using requests; runs inside a thread executor."""
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }
    if cookie:
        headers["Cookie"] = cookie

    response = requests.get(url, headers=headers, timeout=timeout, allow_redirects=True)
    response.raise_for_status()
    return response.text[:MAX_CONTENT_BYTES], response.status_code, response.url


async def fetch_page(
    url: str,
    cookie: Optional[str] = None,
    timeout: Optional[float] = None,
) -> tuple[str, int, str]:
    """
    Fetch the HTML of a URL without blocking the event loop.
    Returns (html_content, status_code, final_url).

    Each call runs on its own thread. When the caller stops waiting (per-page
    timeout), the blocked request keeps only that thread and never delays the
    next page's fetch. `timeout` caps the requests timeout so such a thread
    exits within roughly one page budget.

    Any requests failure (non-2xx, DNS, refused connection, unsupported scheme)
    is re-raised as ExtractionFailed.
    """
    budget = min(FETCH_TIMEOUT, timeout) if timeout else FETCH_TIMEOUT
    logger.debug("GET %s (timeout=%.1fs)", url, budget)

    loop = asyncio.get_event_loop()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fetch")
    try:
        return await loop.run_in_executor(executor, partial(_sync_fetch, url, cookie, budget))
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else "?"
        raise ExtractionFailed(url, f"HTTP error! status: {status}") from exc
    except requests.RequestException as exc:
        raise ExtractionFailed(url, str(exc)) from exc
    finally:
        # don't join: an abandoned fetch finishes in the background and its result is dropped
        executor.shutdown(wait=False)
