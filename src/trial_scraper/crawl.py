"""Crawl orchestration: submit a job, poll it, fetch gaps and collect recruiting trials."""
import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from .clients.firecrawl import FirecrawlClient
from .config import CrawlConfig
from .errors import AcquisitionError, CrawlFailedError, CrawlTimeoutError
from .filters import is_recruiting
from .model import CrawlPage, CrawlStatus, RunStats, TrialRecord
from .trial_parser import build_trial_record

logger = logging.getLogger(__name__)


class CrawlState(str, Enum):
    IDLE = "idle"
    JOB_SUBMITTED = "job_submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"


class CrawlOrchestrator:
    """Drives one crawl run from job submission to the filtered trial list.

    The run is strictly sequential. Polling blocks until the job completes or
    fails; ``max_poll_attempts`` and ``poll_timeout`` on the config bound the
    wait when set.
    """

    def __init__(
        self,
        client: FirecrawlClient,
        config: CrawlConfig,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.config = config
        self._sleep = sleep
        self._clock = clock
        self.state = CrawlState.IDLE
        self.job_id: Optional[str] = None
        self.stats = RunStats()

    def _transition(self, state: CrawlState) -> None:
        logger.debug(f"Crawl state {self.state.value} -> {state.value}")
        self.state = state

    def submit(self) -> str:
        job_id = self.client.submit_job(
            start_url=self.config.start_url,
            limit=self.config.limit,
            max_depth=self.config.max_depth,
            include_paths=self.config.include_paths,
            exclude_paths=self.config.exclude_paths,
            content_format=self.config.content_format,
        )
        if not job_id:
            raise AcquisitionError("Unexpected crawl response from Firecrawl.")
        self.job_id = job_id
        self._transition(CrawlState.JOB_SUBMITTED)
        logger.info(f"Crawl job {job_id} submitted")
        return job_id

    def wait_for_completion(self, job_id: str) -> CrawlStatus:
        """Poll the job until it completes.

        Raises:
            CrawlFailedError: If the service reports the job as failed
            CrawlTimeoutError: If a configured attempt or time ceiling is hit
        """
        self._transition(CrawlState.POLLING)
        started = self._clock()
        attempts = 0

        while True:
            status = self.client.get_job_status(job_id)
            attempts += 1

            if status.status == "completed":
                self._transition(CrawlState.COMPLETED)
                logger.info(f"Crawl job {job_id} completed after {attempts} status checks")
                return status
            if status.status == "failed":
                raise CrawlFailedError(f"Crawl failed: {status.error or 'Unknown error'}")

            max_attempts = self.config.max_poll_attempts
            if max_attempts is not None and attempts >= max_attempts:
                raise CrawlTimeoutError(
                    f"Crawl {job_id} still '{status.status}' after {attempts} status checks"
                )
            timeout = self.config.poll_timeout
            if timeout is not None and self._clock() - started >= timeout:
                raise CrawlTimeoutError(
                    f"Crawl {job_id} still '{status.status}' after {timeout} seconds"
                )

            logger.debug(f"Crawl job {job_id} status '{status.status}', waiting {self.config.poll_interval}s")
            self._sleep(self.config.poll_interval)

    def collect_pages(self, status: CrawlStatus) -> List[CrawlPage]:
        """Gather all result pages, following ``next`` links in order."""
        pages = list(status.results)
        next_url = status.next
        while next_url:
            logger.debug(f"Fetching next crawl results from {next_url}")
            more = self.client.get_next_results(next_url)
            pages.extend(more.results)
            next_url = more.next
        return pages

    def resolve_text(self, page: CrawlPage) -> str:
        if page.text:
            return page.text
        self.stats.fallback_fetches += 1
        logger.debug(f"No inline markdown for {page.url}, scraping it")
        return self.client.fetch_single(page.url, self.config.content_format)

    def process_pages(self, pages: List[CrawlPage]) -> List[TrialRecord]:
        """Parse pages into trial records and keep recruiting ones, in order."""
        trials = []
        for page in pages:
            self.stats.pages_seen += 1
            if not page.url:
                self.stats.skipped_no_url += 1
                continue

            markdown = self.resolve_text(page)
            if not markdown:
                self.stats.skipped_no_text += 1
                logger.debug(f"Skipping {page.url}: no content")
                continue

            trial = build_trial_record(markdown, page.url)
            if not trial.nct_id:
                self.stats.skipped_no_id += 1
                logger.debug(f"Skipping {page.url}: no NCT identifier")
                continue

            if is_recruiting(trial.recruitment_status):
                trials.append(trial)
                self.stats.kept += 1
            else:
                self.stats.not_recruiting += 1
        return trials

    def run(self) -> List[TrialRecord]:
        """Execute the full crawl and return recruiting trials.

        Any error is fatal: the state moves to ``failed`` and the error propagates.
        """
        try:
            job_id = self.submit()
            status = self.wait_for_completion(job_id)
            pages = self.collect_pages(status)
            trials = self.process_pages(pages)
        except Exception:
            self._transition(CrawlState.FAILED)
            raise

        logger.info(
            f"Processed {self.stats.pages_seen} pages: {self.stats.kept} recruiting, "
            f"{self.stats.not_recruiting} not recruiting, {self.stats.fallback_fetches} fallback fetches, "
            f"{self.stats.skipped_no_url + self.stats.skipped_no_text + self.stats.skipped_no_id} skipped"
        )
        return trials
