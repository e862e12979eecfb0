from dataclasses import dataclass, field
from typing import Optional


@dataclass
class HtmlElement:
    tag: str
    text: str = ""
    attrs: dict[str, str] = field(default_factory=dict)

    @property
    def href(self) -> Optional[str]:
        return self.attrs.get("href")


@dataclass
class CrawlFailure:
    url: str
    kind: str                           # timeout | extraction_failed
    message: str

    def to_dict(self) -> dict:
        return {"url": self.url, "kind": self.kind, "message": self.message}


@dataclass
class CrawlReport:
    seed: str
    visited: list[str] = field(default_factory=list)        # visitation order
    failures: list[CrawlFailure] = field(default_factory=list)

    @property
    def failed_urls(self) -> list[str]:
        return [f.url for f in self.failures]

    @property
    def has_timeouts(self) -> bool:
        return any(f.kind == "timeout" for f in self.failures)

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "urls": list(self.visited),
            "failures": [f.to_dict() for f in self.failures],
            "count": len(self.visited),
        }
