"""Data models for trial records and acquisition service payloads."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    """One study site, split from a ``City, State, Country`` line."""

    model_config = ConfigDict(frozen=True)

    city: str = ""
    state: str = ""
    country: str = ""


class EligibilityInfo(BaseModel):
    """Fields parsed from the eligibility section."""

    model_config = ConfigDict(frozen=True)

    inclusion: str = ""
    exclusion: str = ""
    age: str = ""
    sex: str = ""


class TrialRecord(BaseModel):
    """Normalized trial record; missing data is an empty string or list."""

    model_config = ConfigDict(frozen=True)

    nct_id: str = ""
    title: str = ""
    condition: str = ""
    recruitment_status: str = ""
    inclusion_criteria: str = ""
    exclusion_criteria: str = ""
    age_requirements: str = ""
    sex: str = ""
    locations: List[Location] = Field(default_factory=list)
    sponsor: str = ""
    contact_info: str = ""
    source_url: str


class ContentFormat(BaseModel):
    """Content request sent with crawl and scrape calls."""

    formats: List[str] = Field(default_factory=lambda: ["markdown"])
    only_main_content: bool = True

    def to_payload(self) -> Dict[str, Any]:
        return {"formats": list(self.formats), "onlyMainContent": self.only_main_content}


class CrawlPage(BaseModel):
    """A single crawl result item."""

    url: str = ""
    text: str = ""

    @classmethod
    def from_payload(cls, item: Dict[str, Any]) -> "CrawlPage":
        metadata = item.get("metadata") if isinstance(item.get("metadata"), dict) else {}
        url = item.get("url") or item.get("sourceUrl") or metadata.get("sourceURL") or ""
        text = item.get("markdown") or item.get("content") or ""
        return cls(url=url, text=text)


class CrawlStatus(BaseModel):
    """Crawl job status as reported by the acquisition service."""

    status: str = ""
    results: List[CrawlPage] = Field(default_factory=list)
    error: Optional[str] = None
    next: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CrawlStatus":
        items = payload.get("data") or payload.get("pages") or []
        return cls(
            status=payload.get("status") or "",
            results=[CrawlPage.from_payload(item) for item in items if isinstance(item, dict)],
            error=payload.get("error"),
            next=payload.get("next"),
        )


class RunStats(BaseModel):
    """Counters collected while processing crawl results."""

    pages_seen: int = 0
    fallback_fetches: int = 0
    skipped_no_url: int = 0
    skipped_no_text: int = 0
    skipped_no_id: int = 0
    not_recruiting: int = 0
    kept: int = 0
