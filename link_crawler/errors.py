class CrawlError(Exception):
    """Base class for every error raised by the link crawler."""


class InvalidURL(CrawlError, ValueError):
    """Raised when a URL cannot be parsed as an absolute URL."""

    def __init__(self, url: str, reason: str = "not a valid absolute URL"):
        super().__init__(f"{url!r}: {reason}")
        self.url = url
        self.reason = reason


class ExtractionFailed(CrawlError):
    """Fetching or parsing one page failed (non-2xx, unreachable host, bad markup)."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Extraction failed for {url}: {message}")
        self.url = url
        self.message = message


class FetchTimeout(CrawlError):
    """One page's extraction exceeded its time budget."""

    def __init__(self, url: str, timeout: float):
        super().__init__(f"Request timed out after {timeout:g}s: {url}")
        self.url = url
        self.timeout = timeout
