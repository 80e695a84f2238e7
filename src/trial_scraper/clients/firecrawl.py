"""Firecrawl v1 client for crawling and scraping study pages."""
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from ..errors import AcquisitionError
from ..model import ContentFormat, CrawlStatus

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.firecrawl.dev/v1"


class FirecrawlClient:
    """Client for the Firecrawl crawl/scrape API."""

    def __init__(
        self,
        api_key: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            api_key: Firecrawl API key
            api_base: API base URL
            timeout: Per-request timeout in seconds
            session: HTTP session, a new plain session if omitted
        """
        self.api_key = api_key
        self.base_url = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, url: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            response = self.session.request(method, url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise AcquisitionError(f"Firecrawl request failed: {e}") from e

        if not response.ok:
            raise AcquisitionError(
                f"Firecrawl error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise AcquisitionError(f"Firecrawl returned invalid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise AcquisitionError("Unexpected response shape from Firecrawl.")
        return payload

    def submit_job(
        self,
        start_url: str,
        limit: int,
        max_depth: int,
        include_paths: List[str],
        exclude_paths: List[str],
        content_format: ContentFormat,
    ) -> str:
        """Start a crawl job.

        Returns:
            Job id

        Raises:
            AcquisitionError: If the request fails or no job id is returned
        """
        body = {
            "url": start_url,
            "limit": limit,
            "maxDepth": max_depth,
            "includePaths": include_paths,
            "excludePaths": exclude_paths,
            "scrapeOptions": content_format.to_payload(),
        }
        logger.info(f"Submitting crawl for {start_url} (limit={limit}, maxDepth={max_depth})")
        crawl = self._request("POST", f"{self.base_url}/crawl", body)
        job_id = crawl.get("id")
        if not job_id:
            raise AcquisitionError("Unexpected crawl response from Firecrawl.")
        return job_id

    def _parse_status(self, payload: Dict[str, Any]) -> CrawlStatus:
        try:
            return CrawlStatus.from_payload(payload)
        except ValidationError as e:
            raise AcquisitionError(f"Unexpected crawl status from Firecrawl: {e}") from e

    def get_job_status(self, job_id: str) -> CrawlStatus:
        return self._parse_status(self._request("GET", f"{self.base_url}/crawl/{job_id}"))

    def get_next_results(self, next_url: str) -> CrawlStatus:
        """Fetch the next page of results of a completed crawl."""
        return self._parse_status(self._request("GET", next_url))

    def fetch_single(self, url: str, content_format: ContentFormat) -> str:
        """Scrape one page.

        Best effort: failures are logged and an empty string returned.
        """
        body = {"url": url, **content_format.to_payload()}
        try:
            scraped = self._request("POST", f"{self.base_url}/scrape", body)
        except AcquisitionError as e:
            logger.warning(f"Scrape failed for {url}: {e}")
            return ""

        data = scraped.get("data") if isinstance(scraped.get("data"), dict) else {}
        return data.get("markdown") or scraped.get("markdown") or ""
