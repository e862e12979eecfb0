from typing import Optional
from pydantic import BaseModel, Field, field_validator


class CrawlRequest(BaseModel):
    url: str
    timeout: Optional[float] = Field(default=None, gt=0, le=60)       # per-page budget, seconds
    concurrency: Optional[int] = Field(default=None, ge=1, le=16)
    same_host: bool = False
    max_pages: Optional[int] = Field(default=None, ge=1)

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    def crawler_options(self) -> dict:
        # unset options fall back to the crawler's env-driven defaults
        options = {"same_host": self.same_host}
        for name in ("timeout", "concurrency", "max_pages"):
            value = getattr(self, name)
            if value is not None:
                options[name] = value
        return options


class CrawlFailureOut(BaseModel):
    url: str
    kind: str       # timeout | extraction_failed
    message: str


class CrawlResponse(BaseModel):
    seed: str
    urls: list[str] = []
    failures: list[CrawlFailureOut] = []
    count: int = 0
    cached: bool = False


class HealthResponse(BaseModel):
    status: str
    cache: str  # "connected" or "unavailable"
