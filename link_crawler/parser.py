import re

from bs4 import BeautifulSoup

from .models import HtmlElement


def _clean_text(raw: str) -> str:
    """Collapse whitespace and strip control characters from extracted text."""
    text = re.sub(r"[\r\n\t]+", " ", raw)
    text = re.sub(r" {2,}", " ", text)
    return text.strip()


def _flatten_attrs(attrs: dict) -> dict[str, str]:
    # bs4 returns multi-valued attributes (class, rel) as lists
    return {
        name: " ".join(value) if isinstance(value, list) else value
        for name, value in attrs.items()
    }


def select_elements(html: str, selector: str) -> list[HtmlElement]:
    """
    Parse raw HTML and return every element matching the CSS selector,
    in document order.
    """
    soup = BeautifulSoup(html, "lxml")
    return [
        HtmlElement(
            tag=tag.name,
            text=_clean_text(tag.get_text(separator=" ")),
            attrs=_flatten_attrs(tag.attrs),
        )
        for tag in soup.select(selector)
    ]
