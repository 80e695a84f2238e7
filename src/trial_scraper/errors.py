"""Exception types raised by the trial scraper."""


class ScraperError(Exception):
    """Base class for fatal scraper errors."""


class ConfigurationError(ScraperError):
    """Missing credential or invalid settings."""


class AcquisitionError(ScraperError):
    """The acquisition service returned an error or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CrawlFailedError(AcquisitionError):
    """The crawl job finished with status ``failed``."""


class CrawlTimeoutError(AcquisitionError):
    """The crawl job did not complete within the configured polling ceiling."""
