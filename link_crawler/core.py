import asyncio
import logging
import os
import time
from functools import partial
from typing import Callable, Optional

from .errors import CrawlError, ExtractionFailed, FetchTimeout
from .extractor import ExtractHtml, extract_links
from .models import CrawlFailure, CrawlReport
from .scraper import extract_html as default_extract_html
from .urls import hosts_match, normalize_url, validate_base_url

logger = logging.getLogger(__name__)

CRAWL_TIMEOUT = float(os.getenv("CRAWL_TIMEOUT_SECONDS", "3.0"))  # per page, not per crawl
CRAWL_CONCURRENCY = int(os.getenv("CRAWL_CONCURRENCY", "1"))


class LinkCrawler:
    """
    Discovers every page reachable from a seed URL by following <a href> links.

    The traversal uses an explicit LIFO frontier instead of recursion. With a
    single worker pages are visited in depth-first pre-order, children in sorted
    order. More workers fan out sibling fetches on the same frontier; the visited
    check and mark happen in one step with no await in between, so a URL is never
    claimed twice.

    A page that times out or fails to extract is logged, recorded in the report
    and contributes no links; the crawl carries on with the rest of the frontier.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = CRAWL_TIMEOUT,
        concurrency: int = CRAWL_CONCURRENCY,
        uniform: bool = True,
        same_host: bool = False,
        max_pages: Optional[int] = None,
        cookie: Optional[str] = None,
        extract_html: Optional[ExtractHtml] = None,
        on_failure: Optional[Callable[[CrawlFailure], None]] = None,
    ):
        # raises InvalidURL before anything touches the network
        self.base_url = validate_base_url(base_url)

        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be >= 1")

        self.timeout = timeout
        self.concurrency = concurrency
        self.uniform = uniform
        self.same_host = same_host
        self.max_pages = max_pages
        self.cookie = cookie
        # the real fetch gets the same per-page budget so abandoned requests end with it
        self.extract_html = extract_html or partial(default_extract_html, timeout=timeout)
        self.on_failure = on_failure

    async def crawl(self, seed: Optional[str] = None) -> list[str]:
        """Crawl from `seed` (default: the base URL) and return visited URLs in visit order."""
        report = await self.run(seed)
        return report.visited

    async def run(self, seed: Optional[str] = None) -> CrawlReport:
        """Like crawl(), but returns the full CrawlReport including per-page failures."""
        start_url = self._start_url(seed)
        report = CrawlReport(seed=start_url)
        # fresh per call, never kept on the instance
        visited: set[str] = set()

        frontier: asyncio.LifoQueue[str] = asyncio.LifoQueue()
        frontier.put_nowait(start_url)

        logger.info("Crawl started: %s (workers=%d, timeout=%.1fs)", start_url, self.concurrency, self.timeout)
        started = time.monotonic()

        workers = [
            asyncio.create_task(self._worker(frontier, visited, report))
            for _ in range(self.concurrency)
        ]
        drained = asyncio.ensure_future(frontier.join())
        try:
            # workers only finish on their own if something unexpected blew up
            await asyncio.wait([drained, *workers], return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (drained, *workers):
                task.cancel()
            outcomes = await asyncio.gather(drained, *workers, return_exceptions=True)

        # CancelledError is a BaseException, so only real worker crashes show up here
        for outcome in outcomes[1:]:
            if isinstance(outcome, Exception):
                raise outcome

        logger.info(
            "Crawl finished: %d pages, %d failures in %.2fs",
            len(report.visited), len(report.failures), time.monotonic() - started,
        )
        return report

    def _start_url(self, seed: Optional[str]) -> str:
        if seed is None:
            return self.base_url
        return normalize_url(seed) if self.uniform else seed

    async def _worker(self, frontier: asyncio.LifoQueue, visited: set[str], report: CrawlReport) -> None:
        while True:
            url = await frontier.get()
            try:
                if not self._claim(url, visited, report):
                    continue
                links = await self._expand(url, report)
                # reversed so the smallest link is popped first
                for link in reversed(links):
                    if link not in visited and self._in_scope(link, report.seed):
                        frontier.put_nowait(link)
            finally:
                frontier.task_done()

    def _claim(self, url: str, visited: set[str], report: CrawlReport) -> bool:
        if url in visited:
            return False
        if self.max_pages is not None and len(visited) >= self.max_pages:
            logger.debug("max_pages=%d reached, skipping %s", self.max_pages, url)
            return False
        visited.add(url)
        report.visited.append(url)
        return True

    def _in_scope(self, link: str, seed: str) -> bool:
        return not self.same_host or hosts_match(link, seed)

    async def _expand(self, url: str, report: CrawlReport) -> list[str]:
        # the page being fetched is the base for its own relative links
        base_url = url
        try:
            return await asyncio.wait_for(
                extract_links(
                    url,
                    base_url,
                    extract_html=self.extract_html,
                    uniform=self.uniform,
                    cookie=self.cookie,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            self._record_failure(report, "timeout", FetchTimeout(url, self.timeout))
        except ExtractionFailed as exc:
            self._record_failure(report, "extraction_failed", exc)
        return []

    def _record_failure(self, report: CrawlReport, kind: str, exc: CrawlError) -> None:
        failure = CrawlFailure(url=exc.url, kind=kind, message=str(exc))
        logger.warning("Error crawling %s: %s", failure.url, exc)
        report.failures.append(failure)
        if self.on_failure is not None:
            self.on_failure(failure)
