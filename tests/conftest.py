from __future__ import annotations

from typing import Callable, Dict, List, Optional

import pytest

from trial_scraper.errors import AcquisitionError
from trial_scraper.model import ContentFormat, CrawlStatus


RECRUITING_MARKDOWN = """
# Example Trial Title
NCT12345678

## Conditions
- Diabetes
- Hypertension

Recruitment Status: Recruiting

Sponsor: Example Sponsor Inc.

## Eligibility Criteria
Inclusion Criteria:
- Age 18 years or older
- HbA1c < 9.0

Exclusion Criteria:
- Pregnancy
- Severe renal disease

Sex: All
Minimum Age: 18 Years
Maximum Age: 65 Years

## Locations
- Austin, Texas, United States

## Contacts and Locations
Contact: Jane Doe
Phone: 555-555-5555
Email: jane@example.com
"""

COMPLETED_MARKDOWN = """
# Non Recruiting Trial
NCT87654321
## Conditions
Asthma

Recruitment Status: Completed
"""

MINIMAL_MARKDOWN = """
# Minimal Trial
NCT11111111
Recruitment Status: Not yet recruiting
"""


class FakeFirecrawlClient:
    """In-memory stand-in for the Firecrawl client."""

    def __init__(
        self,
        statuses: List[CrawlStatus],
        scraped: Optional[Dict[str, str]] = None,
        job_id: str = "job-123",
        next_pages: Optional[Dict[str, CrawlStatus]] = None,
    ) -> None:
        self.statuses = list(statuses)
        self.scraped = scraped or {}
        self.job_id = job_id
        self.next_pages = next_pages or {}
        self.submitted: List[dict] = []
        self.status_calls = 0
        self.scrape_calls: List[str] = []

    def submit_job(self, **kwargs) -> str:
        self.submitted.append(kwargs)
        return self.job_id

    def get_job_status(self, job_id: str) -> CrawlStatus:
        self.status_calls += 1
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]

    def get_next_results(self, next_url: str) -> CrawlStatus:
        return self.next_pages[next_url]

    def fetch_single(self, url: str, content_format: ContentFormat) -> str:
        self.scrape_calls.append(url)
        return self.scraped.get(url, "")


class FailingSubmitClient(FakeFirecrawlClient):
    def submit_job(self, **kwargs) -> str:
        raise AcquisitionError("Firecrawl error 401: Unauthorized", status_code=401)


@pytest.fixture()
def recruiting_markdown() -> str:
    return RECRUITING_MARKDOWN


@pytest.fixture()
def completed_markdown() -> str:
    return COMPLETED_MARKDOWN


@pytest.fixture()
def minimal_markdown() -> str:
    return MINIMAL_MARKDOWN


@pytest.fixture()
def make_client() -> Callable[..., FakeFirecrawlClient]:
    return FakeFirecrawlClient


@pytest.fixture()
def make_failing_client() -> Callable[..., FakeFirecrawlClient]:
    return FailingSubmitClient
