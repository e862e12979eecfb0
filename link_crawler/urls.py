from typing import Iterable
from urllib.parse import urldefrag, urlparse

from pydantic import AnyUrl, HttpUrl, TypeAdapter, ValidationError

from .errors import InvalidURL

# WHATWG parsing via pydantic-core: lower-cases scheme/host, percent-encodes the path,
# turns an empty path into "/"
_ANY_URL = TypeAdapter(AnyUrl)
_HTTP_URL = TypeAdapter(HttpUrl)

HTTP_SCHEMES = ("http", "https")


def _canonical(url: str, adapter: TypeAdapter) -> str:
    if not isinstance(url, str) or not url.strip():
        raise InvalidURL(str(url), "empty URL")
    without_fragment, _ = urldefrag(url.strip())
    try:
        return str(adapter.validate_python(without_fragment))
    except ValidationError as exc:
        # first error message is enough, e.g. "relative URL without a base"
        raise InvalidURL(url, exc.errors()[0]["msg"]) from exc


def normalize_url(url: str) -> str:
    """
    Canonical form of an absolute URL, always ending in "/".
    http://x.com and http://x.com/ both become http://x.com/ so set-based dedup works.
    """
    canonical = _canonical(url, _ANY_URL)
    if not canonical.endswith("/"):
        canonical = f"{canonical}/"
    return canonical


def validate_base_url(url: str) -> str:
    """Validate a seed/base URL (absolute http or https) and return its normal form."""
    canonical = _canonical(url, _HTTP_URL)
    return canonical if canonical.endswith("/") else f"{canonical}/"


def is_http_url(url: str) -> bool:
    return urlparse(url).scheme in HTTP_SCHEMES


def hosts_match(url: str, other: str) -> bool:
    return urlparse(url).netloc.lower() == urlparse(other).netloc.lower()


def resolve_link(raw_link: str, base_url: str) -> str:
    """
    Turn an href found on a page into an absolute link.

    Root-relative ("/x") and document-relative ("./x") links are glued onto base_url
    as plain strings; base_url always ends in "/". Anything else is treated as
    absolute and normalized.
    """
    if raw_link.startswith("/"):
        return f"{base_url}{raw_link[1:]}"
    if raw_link.startswith("./"):
        return f"{base_url}{raw_link[2:]}"
    return normalize_url(raw_link)


def finalize_links(links: Iterable[str], uniform: bool = True) -> list[str]:
    """
    Sorted, duplicate-free LinkBatch.

    With uniform=True every link goes through normalize_url first, so "/about"
    resolved on a page and an absolute "https://x.com/about" end up as one entry.
    Sorting is plain string order.
    """
    if uniform:
        links = [normalize_url(link) for link in links]
    return sorted(set(links))
