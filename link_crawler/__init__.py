from .core import LinkCrawler
from .errors import CrawlError, ExtractionFailed, FetchTimeout, InvalidURL
from .extractor import extract_links
from .models import CrawlFailure, CrawlReport, HtmlElement
from .scraper import extract_html
from .urls import finalize_links, normalize_url, resolve_link

__all__ = [
    "LinkCrawler",
    "CrawlError", "InvalidURL", "ExtractionFailed", "FetchTimeout",
    "CrawlReport", "CrawlFailure", "HtmlElement",
    "extract_html", "extract_links",
    "normalize_url", "resolve_link", "finalize_links",
]
